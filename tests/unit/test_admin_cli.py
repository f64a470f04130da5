from observability.admin_cli import main, tail_scores, tail_warnings
from storage.proctoring import insert_proctor_warning
from storage.scores import insert_round_score


def test_tail_prints_latest_rows(capsys):
    insert_proctor_warning(
        owner_id="tab-1", company_id="1", round_index=0, reason="focus_lost", warning_count=3, terminated=True
    )
    insert_round_score(owner_id="tab-1", company_id="1", round_index=1, round_type="aptitude", score=70, feedback="ok")

    tail_warnings(5)
    tail_scores(5)

    out = capsys.readouterr().out
    assert "tab-1/1 round=0 reason=focus_lost warnings=3 TERMINATED" in out
    assert "type=aptitude score=70.0" in out


def test_main_filters_by_owner(capsys):
    for owner in ("tab-1", "tab-2"):
        insert_round_score(owner_id=owner, company_id="2", round_index=0, round_type="coding", score=50, feedback="")

    main(["--tail-scores", "5", "--owner", "tab-2"])

    out = capsys.readouterr().out
    assert "tab-2/2" in out
    assert "tab-1/2" not in out
