import asyncio

import pytest

from conftest import T1, DummyStore, blob
from s3_poller import config, main, poller


def test_main_requires_bucket_and_key(monkeypatch) -> None:
    monkeypatch.setattr(config, "BUCKET", None)
    monkeypatch.setattr(config, "KEY", "k")
    with pytest.raises(SystemExit):
        main.main()


@pytest.mark.asyncio
async def test_run_logs_initial_document(monkeypatch, caplog) -> None:
    store = DummyStore(blob('{"a": 1}', T1))
    real_poller = poller.S3Poller

    def fake_poller(**kwargs):
        return real_poller(store=store, **kwargs)

    monkeypatch.setattr(main, "S3Poller", fake_poller)
    caplog.set_level("INFO", logger="s3_poller.main")

    task = asyncio.create_task(main.run("b", "k", 60_000))
    await asyncio.sleep(0.05)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert store.calls == [("b", "k", None)]
    assert 'Document: {"a": 1}' in caplog.text
    assert "Watching s3://b/k" in caplog.text
