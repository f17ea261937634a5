"""
Cloud Run HTTP Wrapper for the ChronoLegi Monitor
Provides HTTP endpoints that trigger the daily report and the hourly probe
(for Cloud Scheduler instead of the in-process cron)
"""
from flask import Flask, jsonify
import logging
import traceback

from legi_monitor.config import settings
from legi_monitor.main import build_history, process_legi_updates, process_log_updates

logger = logging.getLogger(__name__)


def _respond(name, result):
    if result['status'] == 'aborted':
        return jsonify({
            'status': 'error',
            'message': f"{name} aborted: {result.get('error', '')}",
            'result': result,
        }), 500
    return jsonify({
        'status': 'success',
        'message': f"{name} completed ({result['status']})",
        'result': result,
    }), 200


def create_app(history=None, settings=settings, daily=process_legi_updates, hourly=process_log_updates):
    """Build the Flask app; *history* is loaded once here when not given"""
    app = Flask(__name__)
    if history is None:
        history = build_history(settings)

    def run(name, job, *args):
        logger.info("="*80)
        logger.info(f"Received HTTP trigger request: {name}")
        logger.info("="*80)
        try:
            return _respond(name, job(*args, settings=settings))
        except Exception as e:
            logger.error(f"Error during {name}: {str(e)}")
            logger.error(traceback.format_exc())
            return jsonify({'status': 'error', 'message': str(e)}), 500

    @app.route('/daily', methods=['GET', 'POST'])
    def trigger_daily():
        """Run the daily modification report"""
        return run("daily report", daily)

    @app.route('/hourly', methods=['GET', 'POST'])
    def trigger_hourly():
        """Run the hourly version probe"""
        return run("hourly probe", hourly, history)

    @app.route('/health', methods=['GET'])
    def health_check():
        """Health check endpoint"""
        return jsonify({'status': 'healthy'}), 200

    return app


if __name__ == '__main__':
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logger.info(f"Starting server on port {settings.PORT}")
    create_app().run(host='0.0.0.0', port=settings.PORT)
