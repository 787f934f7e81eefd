"""Property-based tests for stored gallery file names."""

import re

from hypothesis import given
from hypothesis import strategies as st

from backoffice.services.image_storage import build_stored_file_name

# Strategies for generating upload names
stems = st.text(min_size=0, max_size=300)
extensions = st.sampled_from(["png", "PNG", "jpg", "JPEG", "jpeg"])

STORED_NAME = re.compile(r"[a-z0-9-]{1,100}-[0-9a-f]{32}(\.[^/\\]+)?")


@given(stem=stems, extension=extensions)
def test_stored_name_is_safe_and_keeps_extension(stem, extension):
    """Whatever the client sends, the stored name is a flat, lowercase, unique-suffixed name."""
    name = build_stored_file_name(f"{stem}.{extension}")

    assert "/" not in name and "\\" not in name
    assert STORED_NAME.fullmatch(name)
    assert name.endswith(f".{extension.lower()}")


@given(original=st.text(max_size=100))
def test_same_upload_name_never_collides(original):
    """Two uploads with the same original name get different stored names."""
    assert build_stored_file_name(original) != build_stored_file_name(original)


@given(original=st.text(max_size=300))
def test_stem_has_no_leading_or_trailing_dash(original):
    match = re.fullmatch(r"(?P<base>[a-z0-9-]+)-[0-9a-f]{32}(\..*)?", build_stored_file_name(original), re.S)

    assert match
    base = match.group("base")
    assert 1 <= len(base) <= 100
    assert not base.startswith("-")
    assert not base.endswith("-")
