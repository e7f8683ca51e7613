import unittest

from doodlesolve.chat.knowledge import KnowledgeTable
from doodlesolve.chat.responder import EMPTY_REPLY_MESSAGE, FAILURE_MESSAGE, ChatResponder
from doodlesolve.llm import MalformedResponse, RemoteUnavailable
from tests.mocks.fake_llm import ScriptedClient


def _table() -> KnowledgeTable:
    return KnowledgeTable([("hi", "A"), ("hello", "B"), ("who made you", "C")])


class ChatResponderTestCase(unittest.IsolatedAsyncioTestCase):
    async def test_exact_table_hit_skips_remote_model(self) -> None:
        client = ScriptedClient(replies=["remote"])
        responder = ChatResponder(_table(), client)

        self.assertEqual(await responder.respond("  Who made you "), "C")
        self.assertEqual(len(client.calls), 0)

    async def test_substring_hit_returns_first_entry_in_order(self) -> None:
        client = ScriptedClient(replies=["remote"])
        responder = ChatResponder(_table(), client)

        self.assertEqual(await responder.respond("hi there"), "A")
        self.assertEqual(len(client.calls), 0)

    async def test_table_miss_calls_remote_once(self) -> None:
        client = ScriptedClient(replies=["# Quantum\nQubits..."])
        responder = ChatResponder(_table(), client)

        reply = await responder.respond("tell me about quantum computing")

        self.assertEqual(reply, "# Quantum\nQubits...")
        self.assertEqual(len(client.calls), 1)
        self.assertEqual(client.calls[0]["user"], "tell me about quantum computing")
        self.assertIsNone(client.calls[0]["image"])

    async def test_empty_remote_reply_becomes_trouble_message(self) -> None:
        responder = ChatResponder(_table(), ScriptedClient(replies=["   "]))

        self.assertEqual(await responder.respond("explain entropy"), EMPTY_REPLY_MESSAGE)

    async def test_remote_failure_falls_back_to_table(self) -> None:
        client = ScriptedClient(replies=[RemoteUnavailable("timeout")])
        responder = ChatResponder(_table(), client, static_first=False)

        reply = await responder.respond("so, who made you anyway?")

        self.assertEqual(reply, "C")
        self.assertEqual(len(client.calls), 1)

    async def test_remote_failure_without_table_match_returns_generic_message(self) -> None:
        client = ScriptedClient(replies=[RemoteUnavailable("connection reset")])
        responder = ChatResponder(_table(), client)

        self.assertEqual(await responder.respond("explain entropy"), FAILURE_MESSAGE)

    async def test_unexpected_client_errors_never_escape(self) -> None:
        failures = [MalformedResponse("bad payload"), ValueError("bad json"), TimeoutError("slow")]
        for exc in failures:
            with self.subTest(error=type(exc).__name__):
                responder = ChatResponder(KnowledgeTable([("hi", "A")]), ScriptedClient(replies=[exc]))
                self.assertEqual(await responder.respond("explain entropy"), FAILURE_MESSAGE)

    async def test_unexpected_client_error_still_uses_table_fallback(self) -> None:
        client = ScriptedClient(replies=[ValueError("bad json")])
        responder = ChatResponder(_table(), client, static_first=False)

        self.assertEqual(await responder.respond("so, who made you anyway?"), "C")

    async def test_static_first_disabled_always_asks_remote(self) -> None:
        client = ScriptedClient(replies=["remote hello"])
        responder = ChatResponder(_table(), client, static_first=False)

        self.assertEqual(await responder.respond("hello"), "remote hello")
        self.assertEqual(len(client.calls), 1)

    async def test_system_prompt_embeds_persona_and_knowledge(self) -> None:
        client = ScriptedClient(replies=["ok"])
        responder = ChatResponder(
            _table(),
            client,
            prompt_pack={"system": "Assistant of {{institution}}.\n{{knowledge}}"},
            persona={"institution": "Test College"},
        )

        await responder.respond("what is a derivative")

        system = client.calls[0]["system"]
        self.assertTrue(system.startswith("Assistant of Test College."))
        self.assertIn('- When asked "hello": B', system)


if __name__ == "__main__":
    unittest.main()
