"""Tests for label-based pattern extraction."""

from datetime import date

from contact_intel.layers.extraction import (
    extract_fields,
    extract_social_posts,
    social_platform
)


class TestExtractFields:
    """Tests for extract_fields."""

    def test_russian_company_text(self):
        """Extract company facts from a Russian summary."""
        fields = extract_fields(
            "Отрасль: информационные технологии. Выручка: 500 млрд руб. Сотрудников: 50000."
        )

        assert fields.industry == "информационные технологии"
        assert fields.revenue == "500 млрд руб"
        assert fields.employees == "50000"
        assert fields.products is None
        assert fields.job_title is None

    def test_english_labels(self):
        fields = extract_fields("Industry: retail, revenue: $12 billion\nemployees: 4000")

        assert fields.industry == "retail"
        assert fields.revenue == "$12 billion"
        assert fields.employees == "4000"

    def test_case_insensitive(self):
        assert extract_fields("ОТРАСЛЬ: финансы.").industry == "финансы"

    def test_first_pattern_wins(self):
        """'выручка' is tried before 'доход'."""
        fields = extract_fields("Доход: 10 млн руб. Выручка: 20 млн руб.")
        assert fields.revenue == "20 млн руб"

    def test_empty_capture_falls_through(self):
        """A label followed directly by a delimiter is not a match."""
        fields = extract_fields("Отрасль. Сфера: логистика.")
        assert fields.industry == "логистика"

    def test_labels_are_whole_words(self):
        """A label inside a longer word is not a label."""
        fields = extract_fields("Компания, в штате которой 26 тысяч человек. Атмосфера: дружная.")

        assert fields.employees is None
        assert fields.industry is None

    def test_inflected_labels(self):
        fields = extract_fields("Доходы: 10 млн руб. Работает в отрасли ритейла. Штат: 300 человек.")

        assert fields.revenue == "10 млн руб"
        assert fields.industry == "ритейла"
        assert fields.employees == "300 человек"

    def test_value_stops_at_comma_and_newline(self):
        fields = extract_fields("должность: технический директор, москва\nпозиция: cto")
        assert fields.job_title == "технический директор"

    def test_no_matches(self):
        fields = extract_fields("Ничего полезного здесь нет")
        assert fields.industry is None
        assert fields.revenue is None

    def test_non_text_input(self):
        """Malformed input never raises."""
        assert extract_fields(None).industry is None
        assert extract_fields(42).revenue is None


class TestSocialPosts:
    """Tests for social post extraction from search result items."""

    def test_platform_names(self):
        assert social_platform("https://www.linkedin.com/in/ivan") == "LinkedIn"
        assert social_platform("https://x.com/ivan/status/1") == "Twitter"
        assert social_platform("https://vk.com/ivan") == "VK"
        assert social_platform("https://t.me/channel") == "Social Media"
        assert social_platform("https://example.com/news") is None

    def test_host_suffix_not_substring(self):
        """Hosts merely containing a social domain are not social."""
        assert social_platform("https://notlinkedin.com.example.org/") is None
        assert social_platform("https://box.com/file") is None

    def test_keeps_first_three_in_order(self):
        items = [
            {"url": "https://news.example.com/a", "title": "News"},
            {"url": "https://linkedin.com/posts/1", "description": "Пост 1"},
            {"url": "https://facebook.com/p/2", "title": "Пост 2"},
            {"url": "https://twitter.com/i/3", "description": "Пост 3"},
            {"url": "https://vk.com/wall4", "description": "Пост 4"},
        ]

        posts = extract_social_posts(items, today=date(2024, 3, 5))

        assert [p.content for p in posts] == ["Пост 1", "Пост 2", "Пост 3"]
        assert [p.platform for p in posts] == ["LinkedIn", "Facebook", "Twitter"]
        assert all(p.date == "05.03.2024" for p in posts)

    def test_ignores_malformed_items(self):
        items = [None, "text", {"title": "no url"}, {"url": 5}]
        assert extract_social_posts(items) == []
