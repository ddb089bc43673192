import pytest

from conftest import WordCounter, words
from gitsum.errors import TokenBudgetExceeded
from gitsum.tokens import DEFAULT_TOKEN_LIMIT, TiktokenCounter, TokenGate


def test_default_limit_is_4096():
    assert DEFAULT_TOKEN_LIMIT == 4096


@pytest.mark.parametrize(
    "count, eligible",
    [(0, True), (4095, True), (4096, True), (4097, False), (5000, False)],
)
def test_is_eligible_boundary(token_gate, count, eligible):
    assert token_gate.is_eligible(words(count)) is eligible


def test_is_eligible_custom_limit(token_gate):
    assert token_gate.is_eligible(words(10), limit=10)
    assert not token_gate.is_eligible(words(11), limit=10)


def test_ensure_eligible_returns_count(token_gate):
    assert token_gate.ensure_eligible("a.py", words(12), limit=12) == 12


def test_ensure_eligible_raises_with_details(token_gate):
    with pytest.raises(TokenBudgetExceeded) as exc_info:
        token_gate.ensure_eligible("oversized.rs", words(5000))

    err = exc_info.value
    assert err.name == "oversized.rs"
    assert err.token_count == 5000
    assert err.limit == 4096
    assert "oversized.rs" in str(err)


def test_count_is_pure(token_gate):
    text = words(42)
    assert token_gate.count(text) == token_gate.count(text) == 42


def test_default_counter_is_tiktoken():
    gate = TokenGate()
    assert isinstance(gate.counter, TiktokenCounter)
    assert gate.counter.model == "gpt-3.5-turbo"


def test_injected_counter_is_used():
    counter = WordCounter()
    assert TokenGate(counter).counter is counter


@pytest.fixture
def tiktoken_counter():
    counter = TiktokenCounter()
    try:
        counter.encoding
    except Exception as e:
        pytest.skip(f"BPE vocabulary unavailable: {e}")
    return counter


def test_tiktoken_counts_real_text(tiktoken_counter):
    assert tiktoken_counter.count("") == 0
    assert tiktoken_counter.count("hello world") == 2
    assert TokenGate(tiktoken_counter).is_eligible("hello world", limit=2)
    assert not TokenGate(tiktoken_counter).is_eligible("hello world", limit=1)


def test_tiktoken_counts_special_token_text_as_plain_text(tiktoken_counter):
    text = "eof marker: <|endoftext|>"
    with pytest.raises(ValueError):
        tiktoken_counter.encoding.encode(text)
    assert tiktoken_counter.count(text) > 1
