from marathon import machine
from reports import generate_marathon_report_pdf
from reports.pdf import _round_rows


def _played(company_id: str = "1"):
    session = machine.start_session(company_id)
    session = machine.submit_round(session, 80, "Good resume")
    session = machine.next_round(machine.view_feedback(session))
    return machine.submit_round(session, 60, "Needs practice")


def test_round_rows_mark_outcomes(cms):
    company = cms.get_company("1")
    rows = _round_rows(company, _played())
    assert rows[0] == ("1", "RESUME", "80", "-", "scored")
    assert rows[1] == ("2", "APTITUDE", "60", "70%", "fail")
    assert rows[2][-1] == "pending"


def test_report_is_pdf(cms):
    company = cms.get_company("1")
    session = machine.add_warning(_played())
    pdf_bytes = generate_marathon_report_pdf(company, session)
    assert pdf_bytes.startswith(b"%PDF")


def test_report_handles_terminated_and_unicode(cms):
    company = cms.get_company("2")
    session = machine.start_session("2")
    for _ in range(3):
        session = machine.add_warning(session)
    session = machine.submit_round(session, 10, "Stopped early — tab switched")
    assert generate_marathon_report_pdf(company, session).startswith(b"%PDF")
