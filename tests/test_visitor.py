from stadium_gates.visitor import describe_response


def test_describe_assignment():
    text = describe_response(
        {"type": "assigned", "serial": 1000005, "gate": 2, "estimated_wait": 3, "recommended": [1, 2]}
    )
    assert text == "[visitor 1000005] assigned to Gate 2 (estimated wait 3 min, recommended: 1 2)"


def test_describe_error():
    text = describe_response({"type": "error", "code": "already_entered", "message": "no", "serial": 1000000})
    assert text == "[visitor 1000000] already_entered: no"
