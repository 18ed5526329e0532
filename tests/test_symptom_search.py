import pytest

from app.clinical.terminology.errors import SearchCancelledError, TooManyResultsError
from app.clinical.terminology.records import SYMPTOM_FIELDS, TerminologyRecord
from app.clinical.terminology.symptom_search import SymptomSearchEngine
from app.core.search_config import SearchFeatureFlags, SearchTuning
from app.repositories.memory_store import InMemoryTerminologyStore

TUNING = SearchTuning(
    confidence_threshold=0.6,
    max_disease_groups=20,
    single_mode_limit=6,
    min_term_length=2,
    autocomplete_default_limit=10,
    autocomplete_max_limit=50,
)
FLAGS = SearchFeatureFlags(enable_search_logging=True, debug_search=False)


def _engine(store) -> SymptomSearchEngine:
    return SymptomSearchEngine(store, tuning=TUNING, flags=FLAGS)


def _fever_records(count: int) -> list[TerminologyRecord]:
    return [
        TerminologyRecord(
            id=i,
            category="ayurveda",
            traditional_code=f"NAM{i:03d}",
            traditional_title=f"Jvara variant {i}",
            traditional_description="Fever of unknown cause",
            target_code=f"XT{i:03d}",
            target_title=f"Fever disorder {i}",
            confidence_score=0.9,
        )
        for i in range(1, count + 1)
    ]


def _orphan_fever_record(*, id: int, target_code: str) -> TerminologyRecord:
    return TerminologyRecord(
        id=id,
        category="siddha",
        traditional_code=None,
        traditional_description="Fever of unknown cause",
        target_code=target_code,
        confidence_score=0.95,
    )


class TestNormalization:
    """Term clean-up before querying."""

    def test_short_and_blank_terms_dropped(self, memory_store):
        engine = _engine(memory_store)
        assert engine.normalize_terms([" fever ", "a", "", None, "  "]) == ["fever"]

    def test_no_usable_terms_returns_empty(self, memory_store):
        assert _engine(memory_store).search_grouped(["a", " "]) == []
        assert _engine(memory_store).search_grouped([]) == []

    def test_none_terms_returns_empty(self, memory_store):
        assert _engine(memory_store).search_grouped(None) == []


class TestGrouping:
    """Disease groups assembled from symptom matches."""

    def test_two_symptoms_yield_two_groups(self, memory_store):
        groups = _engine(memory_store).search_grouped(["fever", "headache"])
        assert [g.target_code for g in groups] == ["XM4KH5", "XM1AB2"]

    def test_group_contains_all_sibling_categories(self, memory_store):
        groups = _engine(memory_store).search_grouped(["fever", "headache"])
        fever_group = groups[0]
        assert [m.traditional_code for m in fever_group.mappings] == ["NAM001", "SID001", "UNA001"]
        assert fever_group.similarity_score == pytest.approx(0.9)
        assert fever_group.target_title == "Fever disorder (TM2)"

    def test_low_confidence_siblings_excluded_from_group(self, memory_store):
        groups = _engine(memory_store).search_grouped(["fever", "headache"])
        headache_group = groups[1]
        assert [m.traditional_code for m in headache_group.mappings] == ["NAM002", "UNA002"]
        assert headache_group.similarity_score == pytest.approx(0.75)

    def test_each_group_has_unique_categories(self, memory_store):
        for group in _engine(memory_store).search_grouped(["fever"]):
            assert len(group.categories) == len(set(group.categories))

    def test_one_group_per_target_code(self, memory_store):
        groups = _engine(memory_store).search_grouped(["fever"])
        codes = [g.target_code for g in groups]
        assert len(codes) == len(set(codes))

    def test_match_score_reflects_text_overlap(self, memory_store):
        groups = _engine(memory_store).search_grouped(["fever", "headache"])
        assert groups[0].match_score == pytest.approx(1.0)

    def test_unscored_candidates_never_trigger_groups(self, memory_store):
        assert _engine(memory_store).search_grouped(["cough"]) == []

    def test_flat_concatenates_group_mappings(self, memory_store):
        flat = _engine(memory_store).search_flat(["fever", "headache"])
        assert [r.traditional_code for r in flat] == ["NAM001", "SID001", "UNA001", "NAM002", "UNA002"]


class TestAndSemantics:
    """Every term must hit at least one text field of the triggering record."""

    @pytest.fixture
    def store(self):
        return InMemoryTerminologyStore(
            [
                TerminologyRecord(
                    id=1,
                    category="ayurveda",
                    traditional_code="A1",
                    traditional_description="Persistent fever",
                    target_code="T1",
                    confidence_score=0.9,
                ),
                TerminologyRecord(
                    id=2,
                    category="siddha",
                    traditional_code="S2",
                    traditional_description="Fever in the evening",
                    target_title="Headache pattern",
                    target_code="T2",
                    confidence_score=0.9,
                ),
            ]
        )

    def test_record_matching_one_term_is_excluded(self, store):
        groups = _engine(store).search_grouped(["fever", "headache"])
        assert [g.target_code for g in groups] == ["T2"]

    def test_terms_may_match_different_fields(self, store):
        matched = store.find_all_matching_all_terms(["fever", "headache"], SYMPTOM_FIELDS)
        assert [r.id for r in matched] == [2]

    def test_matching_is_case_insensitive(self, store):
        groups = _engine(store).search_grouped(["FEVER", "HeadAche"])
        assert [g.target_code for g in groups] == ["T2"]


class TestCap:
    """Broad searches are rejected with the would-be group count."""

    def test_exactly_at_cap_is_returned(self):
        groups = _engine(InMemoryTerminologyStore(_fever_records(20))).search_grouped(["fever"])
        assert len(groups) == 20

    def test_over_cap_raises_with_true_count(self):
        with pytest.raises(TooManyResultsError) as excinfo:
            _engine(InMemoryTerminologyStore(_fever_records(25))).search_grouped(["fever"])
        assert excinfo.value.count == 25
        assert excinfo.value.limit == 20

    def test_unresolvable_candidate_does_not_count(self):
        """A record with no traditional code cannot form a group, so it never trips the cap."""
        records = _fever_records(20) + [_orphan_fever_record(id=99, target_code="XT999")]
        groups = _engine(InMemoryTerminologyStore(records)).search_grouped(["fever"])
        assert len(groups) == 20
        assert "XT999" not in {g.target_code for g in groups}

    def test_overflow_count_skips_unresolvable_candidates(self):
        records = _fever_records(20) + [_orphan_fever_record(id=99, target_code="XT999")]
        records.append(
            TerminologyRecord(
                id=100,
                category="unani",
                traditional_code="UNA100",
                traditional_description="Fever with chills",
                target_code="XT100",
                confidence_score=0.8,
            )
        )
        with pytest.raises(TooManyResultsError) as excinfo:
            _engine(InMemoryTerminologyStore(records)).search_grouped(["fever"])
        assert excinfo.value.count == 21


class TestCancellation:
    def test_cancel_between_groups(self, memory_store):
        calls = []

        def is_cancelled():
            calls.append(1)
            return len(calls) > 1

        with pytest.raises(SearchCancelledError):
            _engine(memory_store).search_grouped(["fever", "headache"], is_cancelled=is_cancelled)
        assert len(calls) == 2

    def test_never_cancelled(self, memory_store):
        groups = _engine(memory_store).search_grouped(["fever", "headache"], is_cancelled=lambda: False)
        assert len(groups) == 2
