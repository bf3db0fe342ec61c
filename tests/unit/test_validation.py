import pytest

from linkhub.core.validation import (
    FieldError,
    is_valid_email,
    is_valid_url,
    is_valid_username,
    normalize_username,
    sanitize_string,
    validate_link_data,
    validate_profile_data,
    validate_registration_data,
    validate_social_link_data,
)


@pytest.mark.parametrize(
    "good_url",
    [
        "https://a.com",
        "http://example.com",
        "https://example.com/path",
        "https://example.com/path?query=value",
    ],
)
def test_is_valid_url_accepts_http_https(good_url: str):
    assert is_valid_url(good_url) is True


@pytest.mark.parametrize(
    "bad_url",
    [
        "javascript:alert(1)",
        "ftp://a.com",
        "file:///etc/passwd",
        "not-a-url",
        "example.com",
        "",
        None,
        42,
    ],
)
def test_is_valid_url_rejects_other_schemes_and_garbage(bad_url):
    assert is_valid_url(bad_url) is False


def test_is_valid_email():
    assert is_valid_email("test@example.com")
    assert is_valid_email("user+tag@example.co.uk")
    assert not is_valid_email("not-an-email")
    assert not is_valid_email("@example.com")
    assert not is_valid_email("user@")
    assert not is_valid_email("")


@pytest.mark.parametrize("good", ["user123", "user_name", "user-name", "abc", "a" * 30])
def test_is_valid_username_accepts(good: str):
    assert is_valid_username(good)


@pytest.mark.parametrize("bad", ["ab", "User123", "user@name", "user name", "", "a" * 31, "abc\n"])
def test_is_valid_username_rejects(bad: str):
    assert not is_valid_username(bad)


def test_normalize_username_lowercases_and_trims():
    assert normalize_username("  Alice_01 ") == "alice_01"
    assert normalize_username(None) is None


def test_sanitize_string_removes_angle_brackets_literally():
    assert sanitize_string("<script>alert(1)</script>") == "scriptalert(1)/script"
    assert sanitize_string("Hello <b>World</b>") == "Hello bWorld/b"
    assert sanitize_string("  spaces  ") == "spaces"


def test_sanitize_string_preserves_safe_content():
    assert sanitize_string("Hello World") == "Hello World"
    assert sanitize_string("user@example.com") == "user@example.com"
    # not an HTML escaper: entities and quotes pass through
    assert sanitize_string('&lt;a href="x"&gt;') == '&lt;a href="x"&gt;'


def test_validate_link_data_valid():
    errors = validate_link_data(
        {"title": "My Link", "url": "https://example.com", "description": "A description"}
    )
    assert errors == []


def test_validate_link_data_empty_title_yields_single_title_error():
    errors = validate_link_data({"title": "", "url": "https://x.com"})
    assert errors == [FieldError("title", "Title is required")]


def test_validate_link_data_whitespace_title_is_missing():
    errors = validate_link_data({"title": "   "})
    assert [e.field for e in errors] == ["title"]


@pytest.mark.parametrize("title", ["<>", " <<>> ", "<"])
def test_validate_link_data_title_empty_after_sanitizing_is_missing(title):
    assert validate_link_data({"title": title}) == [FieldError("title", "Title is required")]


def test_validate_link_data_icon_length():
    assert validate_link_data({"icon": "x" * 50}) == []
    assert validate_link_data({"icon": ""}) == []
    assert [e.field for e in validate_link_data({"icon": "x" * 51})] == ["icon"]


def test_validate_link_data_rejects_invalid_url():
    errors = validate_link_data({"title": "My Link", "url": "not-a-url"})
    assert [e.field for e in errors] == ["url"]
    assert errors[0].message == "Invalid URL format"


def test_validate_link_data_empty_url_is_required_error():
    errors = validate_link_data({"url": ""})
    assert errors == [FieldError("url", "URL is required")]


def test_validate_link_data_title_length_boundary():
    assert validate_link_data({"title": "a" * 100}) == []
    errors = validate_link_data({"title": "a" * 101, "url": "https://example.com"})
    assert [e.field for e in errors] == ["title"]


def test_validate_link_data_description_length():
    assert validate_link_data({"description": "a" * 500}) == []
    errors = validate_link_data({"title": "t", "url": "https://example.com", "description": "a" * 501})
    assert [e.field for e in errors] == ["description"]


@pytest.mark.parametrize("description", ["", None])
def test_validate_link_data_empty_description_is_valid(description):
    assert validate_link_data({"description": description}) == []


def test_validate_link_data_absent_fields_are_not_checked():
    assert validate_link_data({}) == []
    assert validate_link_data({"description": "ok"}) == []


def test_validate_link_data_reports_every_error():
    errors = validate_link_data({"title": "", "url": "ftp://x.com", "description": "a" * 501})
    assert [e.field for e in errors] == ["title", "url", "description"]


def test_validate_profile_data_valid():
    errors = validate_profile_data(
        {
            "username": "testuser",
            "display_name": "Test User",
            "bio": "A bio",
            "avatar_url": "https://example.com/avatar.jpg",
            "theme": "dark",
        }
    )
    assert errors == []


@pytest.mark.parametrize(
    "data,field",
    [
        ({"username": "ab"}, "username"),
        ({"username": ""}, "username"),
        ({"display_name": "a" * 51}, "display_name"),
        ({"bio": "a" * 501}, "bio"),
        ({"avatar_url": "not-a-url"}, "avatar_url"),
        ({"theme": "neon"}, "theme"),
    ],
)
def test_validate_profile_data_rejects(data, field):
    errors = validate_profile_data(data)
    assert [e.field for e in errors] == [field]


def test_validate_profile_data_does_not_normalize_username():
    errors = validate_profile_data({"username": "TestUser"})
    assert [e.field for e in errors] == ["username"]


def test_validate_profile_data_empty_optional_fields_are_valid():
    assert validate_profile_data({"display_name": "", "bio": None, "avatar_url": ""}) == []


def test_validate_social_link_data():
    assert validate_social_link_data({"platform": "GitHub", "url": "https://github.com/x"}) == []
    errors = validate_social_link_data({"platform": "", "url": "javascript:alert(1)"})
    assert [e.field for e in errors] == ["platform", "url"]
    errors = validate_social_link_data({"platform": "<>", "url": "https://github.com/x"})
    assert errors == [FieldError("platform", "Platform is required")]


def test_validate_registration_data():
    ok = {"email": "a@b.co", "password": "secret1", "username": "alice"}
    assert validate_registration_data(ok) == []

    errors = validate_registration_data({"email": "nope", "password": "123", "username": "A"})
    assert [e.field for e in errors] == ["email", "password", "username"]


def test_field_error_to_dict():
    assert FieldError("title", "Title is required").to_dict() == {
        "field": "title",
        "message": "Title is required",
    }
