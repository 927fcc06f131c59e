"""Porter stemmer, NLTK-extensions flavour.

The TF-IDF vocabulary shipped with a model bundle was built from text stemmed
by ``nltk.stem.PorterStemmer`` in its default ``NLTK_EXTENSIONS`` mode, so
this module has to reproduce that behaviour exactly, quirks included.
"""
from types import MappingProxyType
from typing import Callable, Mapping, NamedTuple, Sequence

TraceHook = Callable[[str, str, str], None]

VOWELS = frozenset("aeiou")

# stem -> surface forms that must map to it regardless of the suffix rules
IRREGULAR_FORMS: Mapping[str, tuple] = MappingProxyType({
    "sky": ("sky", "skies"),
    "die": ("dying",),
    "lie": ("lying",),
    "tie": ("tying",),
    "news": ("news",),
    "inning": ("innings", "inning"),
    "outing": ("outings", "outing"),
    "canning": ("cannings", "canning"),
    "howe": ("howe",),
    "proceed": ("proceed",),
    "exceed": ("exceed",),
    "succeed": ("succeed",),
})


def _invert(table: Mapping[str, tuple]) -> Mapping[str, str]:
    pool = {}
    for stem, forms in table.items():
        for form in forms:
            pool[form] = stem
    return MappingProxyType(pool)


IRREGULAR_POOL: Mapping[str, str] = _invert(IRREGULAR_FORMS)

DOUBLE_CONSONANT = "*d"


class Rule(NamedTuple):
    suffix: str
    replacement: str
    condition: Callable[[str], bool] | None = None


class PorterStemmer:
    """Stateless apart from an optional ``trace(step, before, after)`` hook."""

    def __init__(self, trace: TraceHook | None = None):
        self.trace = trace
        self.pool = IRREGULAR_POOL

        positive = self.has_positive_measure

        def above_one(stem: str) -> bool:
            return self.measure(stem) > 1

        self._step1a_rules = (
            Rule("sses", "ss"),
            Rule("ies", "i"),
            Rule("ss", "ss"),
            Rule("s", ""),
        )
        self._step2_rules = (
            Rule("ational", "ate", positive),
            Rule("tional", "tion", positive),
            Rule("enci", "ence", positive),
            Rule("anci", "ance", positive),
            Rule("izer", "ize", positive),
            Rule("bli", "ble", positive),
            Rule("alli", "al", positive),
            Rule("entli", "ent", positive),
            Rule("eli", "e", positive),
            Rule("ousli", "ous", positive),
            Rule("ization", "ize", positive),
            Rule("ation", "ate", positive),
            Rule("ator", "ate", positive),
            Rule("alism", "al", positive),
            Rule("iveness", "ive", positive),
            Rule("fulness", "ful", positive),
            Rule("ousness", "ous", positive),
            Rule("aliti", "al", positive),
            Rule("iviti", "ive", positive),
            Rule("biliti", "ble", positive),
            Rule("fulli", "ful", positive),
        )
        self._step3_rules = (
            Rule("icate", "ic", positive),
            Rule("ative", "", positive),
            Rule("alize", "al", positive),
            Rule("iciti", "ic", positive),
            Rule("ical", "ic", positive),
            Rule("ful", "", positive),
            Rule("ness", "", positive),
        )
        self._step4_rules = (
            Rule("al", "", above_one),
            Rule("ance", "", above_one),
            Rule("ence", "", above_one),
            Rule("er", "", above_one),
            Rule("ic", "", above_one),
            Rule("able", "", above_one),
            Rule("ible", "", above_one),
            Rule("ant", "", above_one),
            Rule("ement", "", above_one),
            Rule("ment", "", above_one),
            Rule("ent", "", above_one),
            Rule("ion", "", lambda stem: above_one(stem) and stem[-1:] in ("s", "t")),
            Rule("ou", "", above_one),
            Rule("ism", "", above_one),
            Rule("ate", "", above_one),
            Rule("iti", "", above_one),
            Rule("ous", "", above_one),
            Rule("ive", "", above_one),
            Rule("ize", "", above_one),
        )

    # -- predicates -------------------------------------------------------

    def is_consonant(self, word: str, i: int) -> bool:
        if word[i] in VOWELS:
            return False
        if word[i] != "y":
            return True
        # a y is a consonant after a vowel or at the start, so a run of y's
        # alternates starting from whatever precedes the run
        start = i
        while start > 0 and word[start - 1] == "y":
            start -= 1
        first = start == 0 or word[start - 1] in VOWELS
        return first if (i - start) % 2 == 0 else not first

    def cv_form(self, word: str) -> str:
        """The word as a string of ``c`` and ``v``, one letter per character."""
        out = []
        for i, ch in enumerate(word):
            if ch in VOWELS:
                out.append("v")
            elif ch == "y" and i > 0 and out[-1] == "c":
                out.append("v")
            else:
                out.append("c")
        return "".join(out)

    def measure(self, stem: str) -> int:
        """Porter's *m*: the number of ``vc`` runs in the word's c/v form."""
        return self.cv_form(stem).count("vc")

    def has_positive_measure(self, stem: str) -> bool:
        return self.measure(stem) > 0

    def contains_vowel(self, stem: str) -> bool:
        return "v" in self.cv_form(stem)

    def ends_double_consonant(self, word: str) -> bool:
        return (
            len(word) >= 2
            and word[-1] == word[-2]
            and self.is_consonant(word, len(word) - 1)
        )

    def ends_cvc(self, word: str) -> bool:
        """``*o``: ends consonant-vowel-consonant, last one not w, x or y.

        Two-letter vowel-consonant words also qualify.
        """
        n = len(word)
        if (
            n >= 3
            and self.is_consonant(word, n - 3)
            and not self.is_consonant(word, n - 2)
            and self.is_consonant(word, n - 1)
            and word[-1] not in "wxy"
        ):
            return True
        return n == 2 and not self.is_consonant(word, 0) and self.is_consonant(word, 1)

    # -- rule machinery ---------------------------------------------------

    @staticmethod
    def replace_suffix(word: str, suffix: str, replacement: str) -> str:
        if not word.endswith(suffix):
            return word
        if not suffix:
            return word + replacement
        return word[: -len(suffix)] + replacement

    def apply_rule_list(self, word: str, rules: Sequence[Rule]) -> str:
        """Apply the first rule whose suffix matches; stop there either way."""
        for suffix, replacement, condition in rules:
            if suffix == DOUBLE_CONSONANT:
                if self.ends_double_consonant(word):
                    stem = word[:-2]
                    if condition is None or condition(stem):
                        return stem + replacement
                    return word
                continue
            if word.endswith(suffix):
                stem = self.replace_suffix(word, suffix, "")
                if condition is None or condition(stem):
                    return stem + replacement
                return word
        return word

    # -- steps ------------------------------------------------------------

    def step1a(self, word: str) -> str:
        # dies -> die, but flies -> fli
        if word.endswith("ies") and len(word) == 4:
            return self.replace_suffix(word, "ies", "ie")
        return self.apply_rule_list(word, self._step1a_rules)

    def step1b(self, word: str) -> str:
        if word.endswith("ied"):
            if len(word) == 4:
                return self.replace_suffix(word, "ied", "ie")
            return self.replace_suffix(word, "ied", "i")

        if word.endswith("eed"):
            stem = self.replace_suffix(word, "eed", "")
            if self.measure(stem) > 0:
                return stem + "ee"
            return word

        intermediate = None
        for suffix in ("ed", "ing"):
            if word.endswith(suffix):
                candidate = self.replace_suffix(word, suffix, "")
                if self.contains_vowel(candidate):
                    intermediate = candidate
                    break
        if intermediate is None:
            return word

        last = intermediate[-1:]
        return self.apply_rule_list(intermediate, (
            Rule("at", "ate"),
            Rule("bl", "ble"),
            Rule("iz", "ize"),
            Rule(DOUBLE_CONSONANT, last, lambda stem: last not in ("l", "s", "z")),
            Rule("", "e", lambda stem: self.measure(stem) == 1 and self.ends_cvc(stem)),
        ))

    def step1c(self, word: str) -> str:
        return self.apply_rule_list(word, (
            Rule("y", "i", lambda stem: len(stem) > 1 and self.is_consonant(stem, len(stem) - 1)),
        ))

    def step2(self, word: str) -> str:
        # alli -> al runs ahead of the table so that "bli" can follow it
        if word.endswith("alli") and self.has_positive_measure(self.replace_suffix(word, "alli", "")):
            return self.step2(self.replace_suffix(word, "alli", "al"))

        # the "l" of "logi" stays with the stem when checking the measure
        rules = self._step2_rules + (
            Rule("logi", "log", lambda stem: self.has_positive_measure(word[:-3])),
        )
        return self.apply_rule_list(word, rules)

    def step3(self, word: str) -> str:
        return self.apply_rule_list(word, self._step3_rules)

    def step4(self, word: str) -> str:
        return self.apply_rule_list(word, self._step4_rules)

    def step5a(self, word: str) -> str:
        if word.endswith("e"):
            stem = self.replace_suffix(word, "e", "")
            m = self.measure(stem)
            if m > 1:
                return stem
            if m == 1 and not self.ends_cvc(stem):
                return stem
        return word

    def step5b(self, word: str) -> str:
        return self.apply_rule_list(word, (
            Rule("ll", "l", lambda stem: self.measure(word[:-1]) > 1),
        ))

    # -- entry point ------------------------------------------------------

    def steps(self):
        return (
            ("1a", self.step1a),
            ("1b", self.step1b),
            ("1c", self.step1c),
            ("2", self.step2),
            ("3", self.step3),
            ("4", self.step4),
            ("5a", self.step5a),
            ("5b", self.step5b),
        )

    def stem(self, word: str) -> str:
        word = word.lower()

        if word in self.pool:
            result = self.pool[word]
            self._emit("irregular", word, result)
            return result

        # one- and two-letter strings are left alone
        if len(word) <= 2:
            return word

        result = word
        for name, step in self.steps():
            before = result
            result = step(result)
            self._emit(name, before, result)
        return result

    def _emit(self, step: str, before: str, after: str) -> None:
        if self.trace is not None:
            self.trace(step, before, after)


_default = PorterStemmer()


def stem(word: str) -> str:
    return _default.stem(word)
