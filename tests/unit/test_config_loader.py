import tempfile
import unittest
from pathlib import Path

from doodlesolve.utils.config_loader import (
    ConfigError,
    load_app_config,
    load_knowledge_entries,
    load_prompts_registry,
    normalize_pipeline,
    render_prompt_template,
)


class ConfigLoaderTestCase(unittest.TestCase):
    def _write(self, tmpdir: str, name: str, content: str) -> str:
        path = Path(tmpdir) / name
        path.write_text(content, encoding="utf-8")
        return str(path)

    def test_repository_configs_load(self) -> None:
        config = load_app_config("configs/app_config.yml")
        self.assertEqual(config.chat_llm["provider"], "groq")
        self.assertEqual(config.chat_llm["model"], "llama-3.1-8b-instant")
        self.assertIn(config.solve.pipeline, ("two_stage", "combined"))
        self.assertTrue(config.chat.static_first)

        prompts = load_prompts_registry("configs/prompts.yml")
        for name in ("interpreter", "solver", "combined_solver", "chat"):
            self.assertIn(name, prompts)

        entries = load_knowledge_entries("configs/knowledge.yml")
        self.assertEqual(entries[0][0], "hi")
        self.assertEqual(entries[1][0], "hello")

    def test_prompt_inherits_parent_system(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = self._write(
                tmpdir,
                "prompts.yml",
                "registry:\n  base:\n    system: root\n  child:\n    extends: base\n    user: hello\n",
            )
            prompts = load_prompts_registry(path)
        self.assertEqual(prompts["child"], {"system": "root", "user": "hello"})

    def test_prompt_cycle_detected(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = self._write(
                tmpdir,
                "prompts.yml",
                "registry:\n  a:\n    extends: b\n  b:\n    extends: a\n",
            )
            with self.assertRaises(ConfigError):
                load_prompts_registry(path)

    def test_prompt_cycle_message_names_chain(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = self._write(
                tmpdir,
                "prompts.yml",
                "registry:\n  a:\n    extends: b\n  b:\n    extends: a\n",
            )
            with self.assertRaises(ConfigError) as ctx:
                load_prompts_registry(path)
        self.assertIn("a -> b -> a", str(ctx.exception))

    def test_prompt_unknown_parent_rejected(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = self._write(tmpdir, "prompts.yml", "registry:\n  child:\n    extends: ghost\n    user: hi\n")
            with self.assertRaises(ConfigError) as ctx:
                load_prompts_registry(path)
        self.assertIn("ghost", str(ctx.exception))

    def test_prompt_multi_level_inheritance(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = self._write(
                tmpdir,
                "prompts.yml",
                "registry:\n"
                "  leaf:\n    extends: mid\n    user: leaf user\n"
                "  mid:\n    extends: root\n    user: mid user\n"
                "  root:\n    system: root system\n",
            )
            prompts = load_prompts_registry(path)
        self.assertEqual(prompts["leaf"], {"system": "root system", "user": "leaf user"})
        self.assertEqual(prompts["mid"], {"system": "root system", "user": "mid user"})
        self.assertEqual(list(prompts), ["leaf", "mid", "root"])

    def test_repository_logging_section_loads(self) -> None:
        config = load_app_config("configs/app_config.yml")
        self.assertEqual(config.logging["level"], "INFO")
        self.assertEqual(config.logging["format"], "json")

    def test_duplicate_knowledge_trigger_rejected(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = self._write(
                tmpdir,
                "knowledge.yml",
                "entries:\n  - {trigger: hi, answer: A}\n  - {trigger: ' HI ', answer: B}\n",
            )
            with self.assertRaises(ConfigError):
                load_knowledge_entries(path)

    def test_blank_knowledge_answer_rejected(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = self._write(tmpdir, "knowledge.yml", "entries:\n  - {trigger: hi, answer: ''}\n")
            with self.assertRaises(ConfigError):
                load_knowledge_entries(path)

    def test_missing_file_and_non_mapping_root(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            with self.assertRaises(ConfigError):
                load_app_config(str(Path(tmpdir) / "missing.yml"))
            path = self._write(tmpdir, "list.yml", "- a\n- b\n")
            with self.assertRaises(ConfigError):
                load_app_config(path)

    def test_pipeline_names(self) -> None:
        self.assertEqual(normalize_pipeline("Combined"), "combined")
        self.assertEqual(normalize_pipeline("two-stage"), "two_stage")
        with self.assertRaises(ConfigError):
            normalize_pipeline("three_stage")

    def test_render_prompt_template_with_context(self) -> None:
        template = "Problem: {{problem}} | Ctx: {{analysis}} | Keep: {{unknown}} | Tex: \\textcolor{teal}{x}"
        rendered = render_prompt_template(template, {"problem": "x^2", "analysis": {"domain": "algebra"}})
        self.assertIn("Problem: x^2", rendered)
        self.assertIn('"domain": "algebra"', rendered)
        self.assertIn("Keep: {{unknown}}", rendered)
        self.assertIn("\\textcolor{teal}{x}", rendered)


if __name__ == "__main__":
    unittest.main()
