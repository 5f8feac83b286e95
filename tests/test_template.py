from __future__ import annotations

import unittest

from napi_core.template import TemplateError, TemplateResolver


class TemplateResolverTests(unittest.TestCase):
    def test_substitutes_nested_paths(self) -> None:
        resolver = TemplateResolver({"crate": {"name": "demo", "features": ["napi4"]}})
        self.assertEqual(resolver.render('name = "{{ crate.name }}"'), 'name = "demo"')
        self.assertEqual(resolver.render("{{crate.features.0}}"), "napi4")

    def test_text_without_placeholders_is_unchanged(self) -> None:
        resolver = TemplateResolver({})
        text = 'napi = { version = "2" }'
        self.assertEqual(resolver.render(text), text)

    def test_unknown_path_raises(self) -> None:
        with self.assertRaises(TemplateError):
            TemplateResolver({"crate": {}}).render("{{crate.name}}")

    def test_non_scalar_value_raises(self) -> None:
        with self.assertRaises(TemplateError):
            TemplateResolver({"crate": {"name": "demo"}}).render("{{crate}}")

    def test_bad_list_index_raises(self) -> None:
        resolver = TemplateResolver({"items": ["a"]})
        with self.assertRaises(TemplateError):
            resolver.render("{{items.first}}")
        with self.assertRaises(TemplateError):
            resolver.render("{{items.3}}")

    def test_clear_cache(self) -> None:
        context = {"crate": {"name": "old"}}
        resolver = TemplateResolver(context)
        self.assertEqual(resolver.render("{{crate.name}}"), "old")
        context["crate"]["name"] = "new"
        self.assertEqual(resolver.render("{{crate.name}}"), "old")
        resolver.clear_cache()
        self.assertEqual(resolver.render("{{crate.name}}"), "new")


if __name__ == "__main__":
    unittest.main()
