import unittest

from fastapi.testclient import TestClient

from doodlesolve.agents.state import SolutionResult
from doodlesolve.api.server import create_app
from tests.mocks.fake_llm import SAMPLE_IMAGE_DATA_URL, ScriptedClient


class _FakeOrchestrator:
    def __init__(self, result: SolutionResult) -> None:
        self.result = result
        self.images = []

    async def solve(self, image):
        self.images.append(image)
        return self.result

    def describe(self):
        return {"pipeline": "two_stage", "vision_llm": {"provider": "fake"}}


class _FakeResponder:
    def __init__(self) -> None:
        self.llm_client = ScriptedClient()
        self.table = ["hi"]
        self.messages = []

    async def respond(self, message):
        self.messages.append(message)
        return "# Reply\n" + message


class APIServerTestCase(unittest.TestCase):
    def _client(self, result: SolutionResult):
        orchestrator = _FakeOrchestrator(result)
        responder = _FakeResponder()
        app = create_app(orchestrator=orchestrator, responder=responder)
        return TestClient(app), orchestrator, responder

    def test_solve_success_payload(self) -> None:
        client, orchestrator, _ = self._client(SolutionResult.success("2 + 2", "$$4$$"))

        response = client.post("/solve", json={"image": SAMPLE_IMAGE_DATA_URL})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok", "interpreted": "2 + 2", "solution": "$$4$$"})
        self.assertEqual(orchestrator.images[0].data_url, SAMPLE_IMAGE_DATA_URL)

    def test_solve_error_payload_has_no_solution_fields(self) -> None:
        client, _, _ = self._client(SolutionResult.no_problem("Could not recognize an equation."))

        body = client.post("/solve", json={"image": SAMPLE_IMAGE_DATA_URL}).json()

        self.assertEqual(body, {"status": "no_problem", "error": "Could not recognize an equation."})

    def test_solve_rejects_invalid_image_reference(self) -> None:
        client, orchestrator, _ = self._client(SolutionResult.success("x", "y"))

        response = client.post("/solve", json={"image": "not-a-data-url"})

        self.assertEqual(response.status_code, 422)
        self.assertEqual(orchestrator.images, [])

    def test_chat_returns_responder_text(self) -> None:
        client, _, responder = self._client(SolutionResult.success("x", "y"))

        response = client.post("/chat", json={"message": "hello"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"response": "# Reply\nhello"})
        self.assertEqual(responder.messages, ["hello"])

    def test_health_reports_pipeline_and_clients(self) -> None:
        client, _, _ = self._client(SolutionResult.success("x", "y"))

        body = client.get("/health").json()

        self.assertEqual(body["status"], "ok")
        self.assertEqual(body["solve"]["pipeline"], "two_stage")
        self.assertEqual(body["chat_llm"]["provider"], "fake")
        self.assertEqual(body["knowledge_entries"], 1)


if __name__ == "__main__":
    unittest.main()
