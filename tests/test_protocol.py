from stadium_gates.mqtt_topics import arrival_requests, arrival_responses, status_updates


def test_topic_helpers():
    ns = "demo/v0"
    assert arrival_requests(ns) == "demo/v0/arrivals/requests"
    assert arrival_responses("v1", ns) == "demo/v0/arrivals/responses/v1"
    assert status_updates(ns) == "demo/v0/status/updates"


def test_default_namespace():
    assert status_updates() == "stadium/v0/status/updates"
