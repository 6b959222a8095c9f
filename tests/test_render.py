import tempfile
import unittest
from pathlib import Path

import yaml

from src.render import RenderData, RenderError, render_dir, render_template


class RenderTemplateTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        self.base = Path(self.tmpdir.name)
        self.data = RenderData()
        self.data.data["Name"] = "demo"
        self.data.data["Document"] = "a: 1\nb: [x, y]\n"

    def tearDown(self) -> None:
        self.tmpdir.cleanup()

    def _write(self, name: str, text: str) -> Path:
        path = self.base / name
        path.write_text(text, encoding="utf-8")
        return path

    def test_substitutes_scalars_and_embedded_documents(self) -> None:
        path = self._write(
            "cm.yaml",
            "apiVersion: v1\nkind: ConfigMap\nmetadata:\n  name: ${Name}\ndata:\n  doc.yaml: ${Document}\n",
        )
        [obj] = render_template(path, self.data)
        self.assertEqual(obj["metadata"]["name"], "demo")
        self.assertEqual(yaml.safe_load(obj["data"]["doc.yaml"]), {"a": 1, "b": ["x", "y"]})

    def test_multiple_documents_and_order(self) -> None:
        self._write("010-b.yaml", "kind: ConfigMap\nmetadata:\n  name: b\n")
        self._write(
            "000-a.yaml",
            "kind: Namespace\nmetadata:\n  name: a\n---\nkind: ConfigMap\nmetadata:\n  name: a2\n",
        )
        self._write("notes.txt", "ignored")
        objs = render_dir(self.base, self.data)
        self.assertEqual([obj["metadata"]["name"] for obj in objs], ["a", "a2", "b"])

    def test_undefined_value(self) -> None:
        path = self._write("bad.yaml", "kind: ConfigMap\nmetadata:\n  name: ${Missing}\n")
        with self.assertRaises(RenderError):
            render_template(path, self.data)

    def test_invalid_yaml(self) -> None:
        path = self._write("bad.yaml", "kind: [ConfigMap\n")
        with self.assertRaises(RenderError):
            render_template(path, self.data)

    def test_object_without_name(self) -> None:
        path = self._write("bad.yaml", "kind: ConfigMap\nmetadata: {}\n")
        with self.assertRaises(RenderError):
            render_template(path, self.data)

    def test_non_mapping_document(self) -> None:
        path = self._write("bad.yaml", "- just\n- a list\n")
        with self.assertRaises(RenderError):
            render_template(path, self.data)

    def test_missing_file_and_directory(self) -> None:
        with self.assertRaises(RenderError):
            render_template(self.base / "absent.yaml", self.data)
        with self.assertRaises(RenderError):
            render_dir(self.base / "absent", self.data)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
