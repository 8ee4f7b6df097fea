from tripchat.graph.postprocess import has_trip_ready, parse_trip_ready


def test_no_marker_means_no_record():
    assert parse_trip_ready("Destination: Tokyo\nDuration: 10 days") is None
    assert not has_trip_ready("NOT_TRIP_READY_YET")


def test_block_is_parsed_into_normalized_keys():
    text = "Awesome!\nTRIP_READY:\nDestination: Tokyo\nDuration: 10 days\nNumber of travelers: 2\n"
    assert parse_trip_ready(text) == {
        "destination": "Tokyo",
        "duration": "10 days",
        "numberoftravelers": "2",
    }


def test_value_keeps_everything_after_first_colon():
    info = parse_trip_ready("TRIP_READY\nDates: 10:00 on 3 June")
    assert info == {"dates": "10:00 on 3 June"}


def test_marker_lines_and_empty_values_are_skipped():
    text = "TRIP_READY: yes\nOrigin:\nno colon here\n: orphan value\nPurpose: culture"
    assert parse_trip_ready(text) == {"purpose": "culture"}


def test_last_duplicate_wins():
    text = "TRIP_READY:\nDestination: Paris\nDestination: Lyon"
    assert parse_trip_ready(text)["destination"] == "Lyon"


def test_markdown_emphasis_is_removed():
    text = "TRIP_READY:\n**Destination:** Tokyo\n- *Duration*: 5 days"
    assert parse_trip_ready(text) == {"destination": "Tokyo", "duration": "5 days"}
