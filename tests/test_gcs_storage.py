from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from legi_monitor.errors import StorageError
from legi_monitor.storage.gcs_storage import download_history, is_gcs_enabled, upload_history


def _client(exists: bool = True) -> MagicMock:
    client = MagicMock()
    client.bucket.return_value.blob.return_value.exists.return_value = exists
    return client


def test_gcs_disabled_without_bucket() -> None:
    assert is_gcs_enabled("") is False


def test_upload_history_without_bucket_is_a_no_op(tmp_path) -> None:
    assert upload_history(str(tmp_path / "observed_logs.json"), bucket_name="") is False


def test_upload_history_uses_history_prefix(tmp_path) -> None:
    client = _client()
    path = tmp_path / "observed_logs.json"
    path.write_text("[]", encoding="utf-8")

    assert upload_history(str(path), bucket_name="legi-bucket", client=client) is True

    client.bucket.assert_called_once_with("legi-bucket")
    client.bucket.return_value.blob.assert_called_once_with("history/observed_logs.json")
    client.bucket.return_value.blob.return_value.upload_from_filename.assert_called_once_with(str(path))


def test_download_history_reports_missing_remote_copy(tmp_path) -> None:
    path = tmp_path / "observed_logs.json"
    path.write_text("[]", encoding="utf-8")

    assert download_history(str(path), bucket_name="legi-bucket", client=_client(exists=False)) is False
    assert path.read_text(encoding="utf-8") == "[]"


def test_download_history_fetches_remote_copy(tmp_path) -> None:
    client = _client()
    path = tmp_path / "observed_logs.json"

    assert download_history(str(path), bucket_name="legi-bucket", client=client) is True
    client.bucket.return_value.blob.return_value.download_to_filename.assert_called_once_with(str(path))


def test_download_history_raises_when_remote_check_fails(tmp_path) -> None:
    client = _client()
    client.bucket.return_value.blob.return_value.exists.side_effect = RuntimeError("503 transient")

    with pytest.raises(StorageError):
        download_history(str(tmp_path / "observed_logs.json"), bucket_name="legi-bucket", client=client)


def test_upload_errors_are_logged_not_raised(tmp_path) -> None:
    client = _client()
    client.bucket.return_value.blob.return_value.upload_from_filename.side_effect = OSError("denied")

    assert upload_history(str(tmp_path / "observed_logs.json"), bucket_name="legi-bucket", client=client) is False
