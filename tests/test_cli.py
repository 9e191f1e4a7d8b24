import json

from tourguide import cli


def test_track_all_json_summary(capsys):
    code = cli.main(["--json", "track-all", "--users", "4"])

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["tracked"] == 4
    assert payload["failed"] == 0


def test_trip_deals_prints_offers(capsys):
    code = cli.main(["trip-deals", "--user", "internalUser0"])

    assert code == 0
    assert len(capsys.readouterr().out.strip().splitlines()) == 5


def test_reward_radius_flag_is_applied(monkeypatch):
    seen: list[float] = []
    real_build = cli.build_service

    def build(settings):
        svc = real_build(settings)
        real_set = svc.set_reward_radius
        svc.set_reward_radius = lambda miles: (seen.append(miles), real_set(miles))
        return svc

    monkeypatch.setattr(cli, "build_service", build)
    assert cli.main(["--reward-radius", "75", "rewards", "--user", "internalUser1"]) == 0
    assert seen == [75.0]


def test_unknown_user_is_reported_without_a_traceback(capsys):
    code = cli.main(["nearby", "--user", "ghost"])

    assert code == 2
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Unknown traveler 'ghost'" in captured.err
    assert "Traceback" not in captured.err
