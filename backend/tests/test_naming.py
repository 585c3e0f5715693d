import re
import unicodedata

import pytest

from photodrop.services.naming import MAX_NAME_LENGTH, build_public_id, sanitize_name

SAMPLES = [
    "Marie É!!",
    "  Jean   Pierre  ",
    "<script>alert(1)</script>",
    "明美 さくら",
    "Ольга-Мария_2",
    "a\tb\nc",
    "!!!",
    "",
    "x" * 200,
    " ".join(["mot"] * 40),
    "émoji 🎉 party",
    unicodedata.normalize("NFD", "Éloïse"),
]

ALLOWED = re.compile(r"^[\w-]*$")


@pytest.mark.parametrize("value", SAMPLES)
def test_sanitize_is_idempotent(value):
    once = sanitize_name(value)
    assert sanitize_name(once) == once


@pytest.mark.parametrize("value", SAMPLES)
def test_sanitize_output_shape(value):
    result = sanitize_name(value)
    assert len(result) <= MAX_NAME_LENGTH
    assert " " not in result
    assert ALLOWED.match(result)


def test_sanitize_examples():
    assert sanitize_name("Marie É!!") == "Marie_É"
    assert sanitize_name("  Jean   Pierre  ") == "Jean_Pierre"
    assert sanitize_name("<script>") == "script"
    assert sanitize_name("!!!") == ""
    assert sanitize_name(None) == ""


def test_sanitize_drops_combining_marks():
    assert sanitize_name(unicodedata.normalize("NFD", "Marie É!!")) == "Marie_E"


def test_sanitize_truncates_to_sixty():
    assert sanitize_name("x" * 200) == "x" * 60


def test_public_id_combines_name_and_timestamp():
    assert build_public_id("Marie É!!", 1717243200000000000) == "Marie_É_1717243200000000000"


def test_public_id_with_empty_name():
    assert build_public_id("!!!", 42) == "_42"


def test_public_id_defaults_to_current_time():
    assert re.fullmatch(r"Anne_\d+", build_public_id("Anne"))
