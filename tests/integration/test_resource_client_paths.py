from kjoreskole_admin.clients.kjoreskole_sdk.resources_client import ResourceClient


class DummyHttp:
    def __init__(self, response=None):
        self.response = response
        self.calls = []

    def request(self, method, path, json_body=None, headers=None, params=None):
        self.calls.append({"method": method, "path": path, "json_body": json_body, "headers": headers})
        return self.response


def test_list_normalizes_collection_payload() -> None:
    http = DummyHttp(response=[{"id": 1}, {"id": 2}])
    client = ResourceClient(http, "sikkerhetskontroll/")

    rows = client.list()

    assert rows == [{"id": 1}, {"id": 2}]
    assert http.calls[0]["method"] == "GET"
    assert http.calls[0]["path"] == "/sikkerhetskontroll"


def test_create_sends_idempotency_headers() -> None:
    http = DummyHttp(response={"data": {"id": 5, "tittel": "Dekk (kopi)"}})
    client = ResourceClient(http, "/sjekkpunkt")

    created = client.create({"tittel": "Dekk (kopi)"}, idempotency_key="copy-key")

    assert created == {"id": 5, "tittel": "Dekk (kopi)"}
    call = http.calls[0]
    assert call["method"] == "POST"
    assert call["json_body"] == {"tittel": "Dekk (kopi)"}
    assert call["headers"]["Idempotency-Key"] == "copy-key"


def test_update_and_delete_target_the_record_path() -> None:
    http = DummyHttp(response={"id": 4})
    client = ResourceClient(http, "/oppgaver")

    client.update(4, {"status": "FERDIG"})
    client.delete(4)

    assert [(call["method"], call["path"]) for call in http.calls] == [("PUT", "/oppgaver/4"), ("DELETE", "/oppgaver/4")]
