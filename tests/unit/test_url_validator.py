import pytest

from careerlift.schemas.analysis import Source
from careerlift.utils.url_validator import choose_link, is_allowed_domain


@pytest.mark.parametrize("url", [
    "https://www.coursera.org/learn/machine-learning",
    "https://grow.google/certificates/data-analytics/",
    "https://explore.skillbuilder.aws/learn",
    "http://www.kaggle.com/learn",
    "https://www.coursera.org:443/learn/sql",
    "https://WWW.Udemy.com/course/sql",
    "https://mlh.io/seasons/2025/events",
])
def test_trusted_hosts(url):
    assert is_allowed_domain(url)


@pytest.mark.parametrize("url", [
    None,
    "",
    "not a url",
    "ftp://coursera.org/file",
    "https://coursera.org.evil.example/learn",
    "https://example.com/coursera.org",
    "https://evilcoursera.org/learn/sql",
    "https://phishing-google.com/login",
    "https://notudemy.com/course",
    "https://coursera.org@evil.example/learn",
    42,
    {"href": "https://www.coursera.org"},
])
def test_untrusted_or_invalid(url):
    assert not is_allowed_domain(url)


def test_trusted_candidate_kept():
    link = "https://www.udemy.com/course/sql"
    assert choose_link(link, [Source(uri="https://www.edx.org/x", title="edX")]) == link


def test_citation_substituted_for_untrusted_link():
    sources = [
        Source(uri="https://blog.example/post", title="Blog"),
        Source(uri="https://www.edx.org/learn/sql", title="edX SQL"),
    ]
    assert choose_link("https://shady.example/course", sources) == "https://www.edx.org/learn/sql"
    assert choose_link(None, sources) == "https://www.edx.org/learn/sql"


def test_no_trusted_link_anywhere():
    assert choose_link("https://shady.example/course", [{"uri": "https://blog.example", "title": "b"}]) is None


def test_lookalike_candidate_replaced_by_trusted_citation():
    sources = [Source(uri="https://www.coursera.org/learn/sql", title="Coursera")]
    assert choose_link("https://evilcoursera.org/learn/sql", sources) == "https://www.coursera.org/learn/sql"
