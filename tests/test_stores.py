"""
Tests for the localization stores (.strings, JSON, String Catalogs).
"""

import codecs
import json

import pytest

from l10n_gpt.errors import StoreError
from l10n_gpt.models import SimpleUnit, TranslationState, VariantUnit
from l10n_gpt.store import load_resource
from l10n_gpt.store.json_store import JsonResource
from l10n_gpt.store.strings import StringsResource, clean_comment, parse_strings
from l10n_gpt.store.xcstrings import StringCatalogResource


STRINGS_SOURCE = '''\
/* Title of the main window */
"main.title" = "Inbox";

// Button label
"send" = "Send \\"now\\"";

/**
 * @key welcome
 * Shown once after sign-up
 */
"welcome" = "Welcome!\\nGlad you're here.";

"no.comment" = "Plain";
'''


@pytest.fixture
def catalog_path(tmp_path):
    catalog = {
        "sourceLanguage": "en",
        "strings": {
            "Hello": {"comment": "Greeting"},
            "Cancel": {
                "localizations": {
                    "de": {"stringUnit": {"state": "translated", "value": "Abbrechen"}},
                },
            },
            "%lld items": {
                "localizations": {
                    "en": {"variations": {"plural": {
                        "one": {"stringUnit": {"state": "translated", "value": "%lld item"}},
                        "other": {"stringUnit": {"state": "translated", "value": "%lld items"}},
                    }}},
                },
            },
            "CFBundleName": {"shouldTranslate": False},
        },
        "version": "1.0",
    }
    path = tmp_path / "Localizable.xcstrings"
    path.write_text(json.dumps(catalog), encoding="utf-8")
    return path


class TestStringsFormat:
    """Test .strings parsing and writing."""

    def test_parse_entries_and_comments(self):
        """Entries keep order, escapes and preceding comments."""
        units = parse_strings(STRINGS_SOURCE)
        assert list(units) == ["main.title", "send", "welcome", "no.comment"]
        assert units["main.title"] == SimpleUnit("Inbox", "Title of the main window")
        assert units["send"] == SimpleUnit('Send "now"', "Button label")
        assert units["welcome"].value == "Welcome!\nGlad you're here."
        assert units["no.comment"].comment is None

    def test_doc_comment_key_line_removed(self):
        """@key lines and '*' decoration are stripped from doc comments."""
        units = parse_strings(STRINGS_SOURCE)
        assert units["welcome"].comment == "Shown once after sign-up"
        assert clean_comment("/** @key x */") is None

    def test_parse_error_reports_line(self):
        """Garbage in the file raises StoreError with its line."""
        with pytest.raises(StoreError, match="line 2"):
            parse_strings('"a" = "b";\nthis is not valid\n')

    def test_missing_file_is_empty(self, tmp_path):
        """A target that does not exist yet reads as empty."""
        assert StringsResource(tmp_path / "de.strings").read() == {}

    def test_utf16_file(self, tmp_path):
        """UTF-16 files saved by Xcode are readable."""
        path = tmp_path / "Localizable.strings"
        path.write_bytes(codecs.BOM_UTF16_LE + '"a" = "Ä";'.encode("utf-16-le"))
        assert StringsResource(path).read() == {"a": SimpleUnit("Ä")}

    def test_update_and_write(self, tmp_path):
        """Written files parse back to the same content."""
        path = tmp_path / "de.lproj" / "Localizable.strings"
        resource = StringsResource(path)
        resource.update("send", 'Jetzt "senden"', "Button label")
        resource.update("main.title", "Posteingang")
        resource.write()

        assert parse_strings(path.read_text(encoding="utf-8")) == {
            "send": SimpleUnit('Jetzt "senden"', "Button label"),
            "main.title": SimpleUnit("Posteingang"),
        }

    def test_update_keeps_existing_comment(self, tmp_path):
        """Updating without a comment keeps the one already in the file."""
        path = tmp_path / "en.strings"
        path.write_text(STRINGS_SOURCE, encoding="utf-8")
        resource = StringsResource(path)
        resource.update("main.title", "Posteingang")
        assert resource.read()["main.title"].comment == "Title of the main window"

    def test_unicode_escapes_round_trip(self, tmp_path):
        """\\U escapes decode on read and never come back double-escaped."""
        path = tmp_path / "fr.strings"
        path.write_text('"cafe" = "Caf\\U00E9";\n"path" = "C:\\\\dir \\\\x";\n', encoding="utf-8")
        resource = StringsResource(path)
        assert resource.read()["cafe"].value == "Café"

        resource.update("new", "Neu")
        resource.write()

        written = path.read_text(encoding="utf-8")
        assert "\\\\U00E9" not in written
        assert '"cafe" = "Café";' in written
        assert StringsResource(path).read() == {
            "cafe": SimpleUnit("Café"),
            "path": SimpleUnit("C:\\dir \\x"),
            "new": SimpleUnit("Neu"),
        }

    def test_surrogate_pair_escape(self):
        """A \\U surrogate pair decodes to one character."""
        units = parse_strings('"smile" = "\\UD83D\\UDE00";')
        assert units["smile"].value == "\U0001F600"

    def test_unknown_escape_kept(self):
        """Escapes the format does not define stay as written."""
        units = parse_strings('"a" = "50\\%";')
        assert units["a"].value == "50\\%"

    def test_unquoted_key(self):
        """Keys may be written without quotes."""
        units = parse_strings('/* Title */\nmain.title = "Inbox";\nsend-now="Send";\n')
        assert units == {
            "main.title": SimpleUnit("Inbox", "Title"),
            "send-now": SimpleUnit("Send"),
        }

    def test_header_comment_not_attached(self):
        """A comment followed by a blank line belongs to no entry."""
        content = '/* Localizable.strings\n   MyApp */\n\n"a" = "A";\n\n/* Second */\n"b" = "B";\n'
        units = parse_strings(content)
        assert units["a"].comment is None
        assert units["b"].comment == "Second"

    def test_plural_rejected(self, tmp_path):
        """.strings files cannot store plural forms."""
        with pytest.raises(StoreError):
            StringsResource(tmp_path / "x.strings").update("n", {"one": "a"})


class TestJsonStore:
    """Test the flat/plural JSON store."""

    def test_read(self, tmp_path):
        """Strings and plural objects become Simple and Variant units."""
        path = tmp_path / "en.json"
        path.write_text(json.dumps({
            "title": "Inbox",
            "items": {"one": "1 item", "other": "N items"},
        }), encoding="utf-8")

        units = JsonResource(path).read()

        assert units["title"] == SimpleUnit("Inbox")
        assert isinstance(units["items"], VariantUnit)
        assert units["items"].non_empty_forms() == {"one": "1 item", "other": "N items"}

    def test_invalid_value(self, tmp_path):
        """Nested or numeric values are rejected."""
        path = tmp_path / "en.json"
        path.write_text(json.dumps({"n": 3}), encoding="utf-8")
        with pytest.raises(StoreError):
            JsonResource(path).read()

    def test_plural_update_merges(self, tmp_path):
        """New plural forms are merged into existing ones."""
        path = tmp_path / "de.json"
        path.write_text(json.dumps({"items": {"one": "1 Artikel"}}), encoding="utf-8")
        resource = JsonResource(path)
        resource.update("items", {"other": "N Artikel"})
        resource.update("title", "Posteingang")
        resource.write()

        assert json.loads(path.read_text(encoding="utf-8")) == {
            "items": {"one": "1 Artikel", "other": "N Artikel"},
            "title": "Posteingang",
        }


class TestStringCatalog:
    """Test the .xcstrings store."""

    def test_source_view(self, catalog_path):
        """In the source language untouched keys read as themselves."""
        units = StringCatalogResource(catalog_path, "auto").read()
        assert units["Hello"] == SimpleUnit("Hello", "Greeting")
        assert units["Cancel"] == SimpleUnit("Cancel")
        assert isinstance(units["%lld items"], VariantUnit)
        assert "CFBundleName" not in units

    def test_target_view(self, catalog_path):
        """Other languages only show existing localizations."""
        units = StringCatalogResource(catalog_path, "de").read()
        assert units == {"Cancel": SimpleUnit("Abbrechen")}

    def test_update_states(self, catalog_path):
        """Updates record the state per language."""
        resource = StringCatalogResource(catalog_path, "de")
        resource.update("Hello", "Hallo", "Greeting", state=TranslationState.NEEDS_REVIEW)
        resource.update(
            "%lld items", {"one": "%lld Artikel", "other": "%lld Artikel"},
            state=TranslationState.TRANSLATED,
        )
        resource.write()

        catalog = json.loads(catalog_path.read_text(encoding="utf-8"))
        hello = catalog["strings"]["Hello"]
        assert hello["comment"] == "Greeting"
        assert hello["localizations"]["de"]["stringUnit"] == {
            "state": "needs_review", "value": "Hallo",
        }
        plural = catalog["strings"]["%lld items"]["localizations"]["de"]["variations"]["plural"]
        assert plural["other"]["stringUnit"]["value"] == "%lld Artikel"
        # Source localization untouched
        assert "en" in catalog["strings"]["%lld items"]["localizations"]

    def test_written_catalog_reads_back(self, catalog_path):
        """A written catalog shows the new translations in its language view."""
        resource = StringCatalogResource(catalog_path, "de")
        resource.update("Hello", "Hallo")
        resource.write()
        assert StringCatalogResource(catalog_path, "de").read()["Hello"] == SimpleUnit(
            "Hallo", "Greeting"
        )

    def test_missing_catalog(self, tmp_path):
        """Catalogs must exist."""
        with pytest.raises(StoreError):
            StringCatalogResource(tmp_path / "none.xcstrings")


class TestLoadResource:
    """Test store selection by extension."""

    def test_by_extension(self, tmp_path, catalog_path):
        """Each extension picks its store."""
        assert isinstance(load_resource(tmp_path / "a.strings"), StringsResource)
        assert isinstance(load_resource(tmp_path / "a.json"), JsonResource)
        assert isinstance(load_resource(catalog_path, "de"), StringCatalogResource)

    def test_unknown_extension(self, tmp_path):
        """Unsupported files raise StoreError."""
        with pytest.raises(StoreError):
            load_resource(tmp_path / "a.po")
