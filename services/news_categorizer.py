"""
Keyword-based topic classifier for aggregated news.

The rules are an ordered table: the first row whose predicate matches decides
the category. Keywords match on word boundaries, with the usual English
suffixes (s/es/ed/ing) allowed, so "ai" does not fire on "said" and "base"
does not fire on "database" or "coinbase".
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, Tuple

from app.models.news import NewsCategory


@dataclass(frozen=True)
class ClassifierInput:
    text: str
    currency_codes: frozenset[str]


Predicate = Callable[[ClassifierInput], bool]


@dataclass(frozen=True)
class CategoryRule:
    name: str
    category: NewsCategory
    predicate: Predicate


@lru_cache(maxsize=512)
def _keyword_pattern(keyword: str) -> re.Pattern:
    # \b werkt niet rond "layer-2" e.d.; daarom expliciete alfanumerieke grenzen
    return re.compile(rf"(?<![a-z0-9]){re.escape(keyword)}(?:s|es|ed|ing)?(?![a-z0-9])")


def mentions(*keywords: str) -> Predicate:
    """True when any keyword occurs as a whole word/phrase."""
    patterns = tuple(_keyword_pattern(k.lower()) for k in keywords)

    def _predicate(inp: ClassifierInput) -> bool:
        return any(p.search(inp.text) for p in patterns)

    return _predicate


def all_of(*predicates: Predicate) -> Predicate:
    def _predicate(inp: ClassifierInput) -> bool:
        return all(p(inp) for p in predicates)

    return _predicate


def any_of(*predicates: Predicate) -> Predicate:
    def _predicate(inp: ClassifierInput) -> bool:
        return any(p(inp) for p in predicates)

    return _predicate


def tagged_with(*codes: str) -> Predicate:
    """True when the provider tagged the item with one of these currency codes."""
    wanted = frozenset(c.upper() for c in codes)

    def _predicate(inp: ClassifierInput) -> bool:
        return bool(inp.currency_codes & wanted)

    return _predicate


BASE_PHRASES = (
    "base chain", "base network", "base blockchain", "base ecosystem",
    "base mainnet", "base app", "base dapp", "base l2", "built on base",
    "coinbase l2", "coinbase layer 2", "coinbase's l2",
)
LAYER2_TERMS = ("layer 2", "layer-2", "l2")
LAYER2_KEYWORDS = (
    *LAYER2_TERMS, "rollup", "optimism", "arbitrum", "op stack", "superchain",
    "zksync", "scaling solution",
)
DEFI_KEYWORDS = (
    "defi", "decentralized finance", "uniswap", "aave", "compound finance",
    "aerodrome", "liquidity pool", "yield farming",
)
BASE_CURRENCY_CODES = ("ETH", "ETHEREUM", "OP", "ARB")
CRYPTO_KEYWORDS = (
    "crypto", "cryptocurrency", "bitcoin", "btc", "ethereum", "eth", "blockchain",
    "nft", "stablecoin", "web3", "solana", "altcoin", "coinbase", "binance",
)
AI_KEYWORDS = (
    "ai", "artificial intelligence", "machine learning", "chatgpt", "openai",
    "llm", "large language model", "deep learning", "neural network",
)

CATEGORY_RULES: Tuple[CategoryRule, ...] = (
    CategoryRule("base_branded", NewsCategory.BASE, mentions(*BASE_PHRASES)),
    CategoryRule(
        "base_coinbase_combo",
        NewsCategory.BASE,
        any_of(
            all_of(mentions("base"), mentions("coinbase", "blockchain", *LAYER2_TERMS)),
            all_of(mentions("coinbase"), mentions("rollup", *LAYER2_TERMS)),
        ),
    ),
    CategoryRule("layer2", NewsCategory.BASE, mentions(*LAYER2_KEYWORDS)),
    CategoryRule("defi", NewsCategory.BASE, mentions(*DEFI_KEYWORDS)),
    CategoryRule("currency_tag", NewsCategory.BASE, tagged_with(*BASE_CURRENCY_CODES)),
    CategoryRule("crypto", NewsCategory.CRYPTO, mentions(*CRYPTO_KEYWORDS)),
    CategoryRule("ai", NewsCategory.AI, mentions(*AI_KEYWORDS)),
)


def _currency_codes(currencies: Optional[Iterable[Any]]) -> frozenset[str]:
    codes = set()
    for currency in currencies or ():
        if isinstance(currency, Mapping):
            code = currency.get("code")
        else:
            code = currency
        if isinstance(code, str) and code.strip():
            codes.add(code.strip().upper())
    return frozenset(codes)


def match_rule(
    title: str,
    description: str = "",
    currencies: Optional[Iterable[Any]] = None,
    *,
    rules: Sequence[CategoryRule] = CATEGORY_RULES,
) -> Optional[CategoryRule]:
    """Return the first rule that matches, or None."""
    inp = ClassifierInput(
        text=f"{title or ''} {description or ''}".lower(),
        currency_codes=_currency_codes(currencies),
    )
    for rule in rules:
        if rule.predicate(inp):
            return rule
    return None


def categorize(
    title: str,
    description: str = "",
    currencies: Optional[Iterable[Any]] = None,
    *,
    default: NewsCategory = NewsCategory.WORLD,
    rules: Sequence[CategoryRule] = CATEGORY_RULES,
) -> NewsCategory:
    """
    Pure classifier: (title, description, currencies) -> category.
    Always returns a concrete NewsCategory.
    """
    rule = match_rule(title, description, currencies, rules=rules)
    return rule.category if rule else default
