import json
import logging

from solar_scheduler.core.logging import SERVICE_NAME, JsonFormatter


def test_json_formatter_carries_extra_fields():
    record = logging.LogRecord(
        name="solar_scheduler.services.repository",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Record created",
        args=(),
        exc_info=None,
    )
    record.table = "solar_jobs"
    record.record_id = 7

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "Record created"
    assert payload["level"] == "INFO"
    assert payload["service"] == SERVICE_NAME
    assert payload["extra"] == {"table": "solar_jobs", "record_id": 7}


def test_repository_logs_writes_with_record_details(caplog, ctx, make_vendor):
    with caplog.at_level(logging.INFO, logger="solar_scheduler.services.repository"):
        vendor = make_vendor()

    created = [r for r in caplog.records if r.getMessage() == "Record created"]
    assert len(created) == 1
    assert created[0].table == "vendors"
    assert created[0].record_id == vendor.id
    assert created[0].company_id == ctx.company_id
