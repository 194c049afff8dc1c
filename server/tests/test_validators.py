"""表单校验与清洗：纯函数测试（无需数据库）"""

from datetime import date

from catalog.models.bookinstance import BOOK_INSTANCE_STATUSES
from catalog.services.book_service import BOOK_RULES
from catalog.services.bookinstance_service import BOOK_INSTANCE_RULES
from catalog.services.author_service import AUTHOR_RULES
from catalog.utils.validators import (
    FieldRule,
    OptionalDate,
    bounded_text,
    escape,
    normalize_multi,
    validate_fields,
)


class TestNormalizeMulti:

    def test_absent(self):
        assert normalize_multi(None) == []

    def test_scalar(self):
        assert normalize_multi("g1") == ["g1"]

    def test_list_unchanged(self):
        """已是列表时原样保留顺序"""
        assert normalize_multi(["g3", "g1", "g2"]) == ["g3", "g1", "g2"]


class TestEscape:

    def test_markup_characters(self):
        assert escape("<b>A & B</b>") == "&lt;b&gt;A &amp; B&lt;&#x2F;b&gt;"

    def test_quotes(self):
        assert escape("\"it's\"") == "&quot;it&#x27;s&quot;"

    def test_backslash_and_backtick(self):
        assert escape("a\\b`c") == "a&#x5C;b&#96;c"


class TestBookRules:

    def test_valid_submission(self):
        raw = {
            "title": "  Dune ",
            "author": "a1",
            "summary": "Spice.",
            "isbn": "9780441013593",
            "genre": "g1",
        }
        result = validate_fields(raw, BOOK_RULES)
        assert result.is_valid
        assert result.draft["title"] == "Dune"
        assert result.draft["genre"] == ["g1"]

    def test_all_missing_fields_reported_in_one_pass(self):
        """缺失的必填字段一次全部报告，通过的字段保留清洗后的值"""
        raw = {"title": "   ", "author": "a1", "summary": "  <i>Spice</i> ", "isbn": ""}
        result = validate_fields(raw, BOOK_RULES)
        assert not result.is_valid
        assert [e.field for e in result.errors] == ["title", "isbn"]
        assert result.draft["summary"] == "&lt;i&gt;Spice&lt;&#x2F;i&gt;"
        assert result.draft["author"] == "a1"
        assert result.draft["genre"] == []

    def test_genre_elements_sanitized(self):
        raw = {"title": "t", "author": "a", "summary": "s", "isbn": "i", "genre": [" g1 ", "<g2>"]}
        result = validate_fields(raw, BOOK_RULES)
        assert result.draft["genre"] == ["g1", "&lt;g2&gt;"]


class TestAuthorRules:

    def test_max_length(self):
        raw = {"first_name": "x" * 101, "family_name": "Doe"}
        result = validate_fields(raw, AUTHOR_RULES)
        assert [e.field for e in result.errors] == ["first_name"]

    def test_optional_dates(self):
        raw = {"first_name": "Jane", "family_name": "Doe", "date_of_birth": "", "date_of_death": "1817-07-18"}
        result = validate_fields(raw, AUTHOR_RULES)
        assert result.is_valid
        assert result.draft["date_of_birth"] is None
        assert result.draft["date_of_death"] == date(1817, 7, 18)


class TestBookInstanceRules:

    def test_invalid_calendar_date(self):
        raw = {"book": "b1", "imprint": "Penguin", "status": "Loaned", "due_back": "2024-02-30"}
        result = validate_fields(raw, BOOK_INSTANCE_RULES)
        assert [e.field for e in result.errors] == ["due_back"]
        assert result.draft["status"] == "Loaned"

    def test_status_defaults_to_maintenance(self):
        result = validate_fields({"book": "b1", "imprint": "Penguin"}, BOOK_INSTANCE_RULES)
        assert result.is_valid
        assert result.draft["status"] == "Maintenance"
        assert result.draft["due_back"] is None

    def test_status_outside_closed_set(self):
        raw = {"book": "b1", "imprint": "Penguin", "status": "Lost"}
        result = validate_fields(raw, BOOK_INSTANCE_RULES)
        assert [e.field for e in result.errors] == ["status"]

    def test_valid_draft_satisfies_invariants(self):
        raw = {"book": "b1", "imprint": "Penguin", "status": "Reserved", "due_back": "2024-02-29"}
        result = validate_fields(raw, BOOK_INSTANCE_RULES)
        assert result.is_valid
        assert result.draft["status"] in BOOK_INSTANCE_STATUSES
        assert result.draft["due_back"] == date(2024, 2, 29)


class TestRuleIndependence:

    def test_rules_read_only_raw_input(self):
        rules = (
            FieldRule("a", "a 必填"),
            FieldRule("b", "b 必填"),
        )
        result = validate_fields({"b": " x "}, rules)
        assert [e.message for e in result.errors] == ["a 必填"]
        assert result.draft == {"a": "", "b": "x"}

    def test_list_given_for_single_field_takes_first(self):
        result = validate_fields({"a": ["first", "second"]}, (FieldRule("a"),))
        assert result.draft["a"] == "first"


class TestTypedRules:

    def test_length_checked_after_escaping(self):
        """长度按转义后的值计算，错误时草稿保留转义后的值"""
        rules = (FieldRule("name", "名称不能为空", bounded_text(5)),)
        result = validate_fields({"name": "a<b"}, rules)
        assert result.draft["name"] == "a&lt;b"
        assert [e.field for e in result.errors] == ["name"]
        assert "5" in result.errors[0].message

    def test_missing_uses_rule_message(self):
        rules = (FieldRule("name", "名称不能为空", bounded_text(5)),)
        result = validate_fields({}, rules)
        assert [e.message for e in result.errors] == ["名称不能为空"]
        assert result.draft["name"] == ""

    def test_invalid_date_keeps_submitted_text(self):
        rules = (FieldRule("when", "日期无效", OptionalDate),)
        result = validate_fields({"when": " not-a-date "}, rules)
        assert [e.message for e in result.errors] == ["日期无效"]
        assert result.draft["when"] == "not-a-date"

    def test_status_error_lists_choices(self):
        raw = {"book": "b1", "imprint": "Penguin", "status": "Lost"}
        result = validate_fields(raw, BOOK_INSTANCE_RULES)
        assert "Maintenance" in result.errors[0].message
        assert result.draft["status"] == "Lost"
