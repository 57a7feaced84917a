"""The fasttrack CLI driven against the in-process API."""

import asyncio

import httpx

from app.client.cli import parse_args, run


def _run(api_app, *argv):
    args = parse_args(["--base-url", "http://testserver", "--api-key", "test-service-key", "--user", "u1", *argv])
    return asyncio.run(run(args, transport=httpx.ASGITransport(app=api_app)))


def test_start_pause_resume_stop(api_app, capsys):
    assert _run(api_app, "start", "--notes", "cli fast") == 0
    assert "started" in capsys.readouterr().out

    assert _run(api_app, "start") == 1
    assert "already running" in capsys.readouterr().err

    assert _run(api_app, "pause") == 0
    assert "(Paused)" in capsys.readouterr().out
    assert _run(api_app, "resume") == 0
    assert "(Paused)" not in capsys.readouterr().out

    assert _run(api_app, "stop") == 0
    assert "Fast saved to history" in capsys.readouterr().out
    assert _run(api_app, "stop") == 1

    assert _run(api_app, "history") == 0
    assert "cli fast" in capsys.readouterr().out


def test_add_manual_fast_and_stats(api_app, capsys):
    assert _run(api_app, "add", "--start-date", "2024-05-01", "--start-hour", "20", "--end-hour", "12") == 0
    assert "16 hours" in capsys.readouterr().out

    assert _run(api_app, "add", "--start-date", "2024-05-01", "--start-hour", "8", "--end-hour", "8") == 1
    assert "End time must be after start time" in capsys.readouterr().err

    assert _run(api_app, "stats") == 0
    assert '"count": 1' in capsys.readouterr().out


def test_refused_timer_actions_exit_1(api_app, capsys):
    for command in (("pause",), ("resume",), ("notes", "hungry")):
        assert _run(api_app, *command) == 1
        assert "no fast is running" in capsys.readouterr().err

    assert _run(api_app, "start") == 0
    capsys.readouterr()
    assert _run(api_app, "resume") == 1
    assert "not paused" in capsys.readouterr().err

    assert _run(api_app, "pause") == 0
    capsys.readouterr()
    assert _run(api_app, "pause") == 1
    assert "already paused" in capsys.readouterr().err

    assert _run(api_app, "notes", "hungry") == 0
    assert _run(api_app, "status") == 0
    assert "(Paused)" in capsys.readouterr().out
