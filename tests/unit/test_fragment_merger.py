"""Tests for merging batch fragments into a combined analysis."""

import pytest

from conftest import fragment_dict
from creatorvoice.models.analysis import DEFAULT_TONE, AnalysisFragment
from creatorvoice.services.ai_analysis import FragmentMerger


def _fragment(count: int, **kwargs) -> AnalysisFragment:
    return AnalysisFragment.model_validate(fragment_dict(count, **kwargs))


class TestFragmentMerger:
    def setup_method(self) -> None:
        self.merger = FragmentMerger()

    def test_global_indices_follow_batch_offsets(self) -> None:
        fragments = [_fragment(5), _fragment(5), _fragment(2)]

        merged = self.merger.merge(fragments, [5, 5, 2])

        assert [h.source_index for h in merged.templates.hooks] == list(range(1, 13))
        assert [t.index for t in merged.transcripts] == list(range(1, 13))
        assert merged.template_counts == {"hooks": 12, "bridges": 12, "ctas": 12, "nuggets": 12}

    def test_offset_uses_input_size_not_returned_items(self) -> None:
        short = fragment_dict(5)
        # batch 1 only reports transcripts 1 and 4
        short["templates"]["hooks"] = [
            {"pattern": "a", "sourceIndex": 1},
            {"pattern": "b", "sourceIndex": 4},
        ]
        short["transcripts"] = [{"index": 1}, {"index": 4}]
        fragments = [
            AnalysisFragment.model_validate(short),
            _fragment(5),
            _fragment(2),
        ]

        merged = self.merger.merge(fragments, [5, 5, 2])

        hooks = [h.source_index for h in merged.templates.hooks]
        assert hooks[:2] == [1, 4]
        assert hooks[2] == 6
        assert hooks[-2:] == [11, 12]
        assert [t.index for t in merged.transcripts][2] == 6

    def test_missing_index_uses_position(self) -> None:
        data = fragment_dict(3)
        for hook in data["templates"]["hooks"]:
            del hook["sourceIndex"]
        fragments = [_fragment(5), AnalysisFragment.model_validate(data)]

        merged = self.merger.merge(fragments, [5, 3])

        assert [h.source_index for h in merged.templates.hooks][5:] == [6, 7, 8]

    def test_identical_templates_are_kept(self) -> None:
        fragments = [_fragment(1), _fragment(1)]

        merged = self.merger.merge(fragments, [1, 1])

        patterns = [h.pattern for h in merged.templates.hooks]
        assert patterns == ["I [achievement] in [timeframe]", "I [achievement] in [timeframe]"]
        assert [h.source_index for h in merged.templates.hooks] == [1, 2]

    def test_phrase_sets_deduplicated_in_first_seen_order(self) -> None:
        fragments = [
            _fragment(1, power_words=["bold", "direct"]),
            _fragment(1, power_words=["direct", "urgent", "bold"]),
        ]

        merged = self.merger.merge(fragments, [1, 1])

        assert merged.style_signature.power_words == ["bold", "direct", "urgent"]
        assert merged.style_signature.filler_phrases == ["you know"]

    def test_dedup_is_exact_string(self) -> None:
        fragments = [
            _fragment(1, power_words=["Bold"]),
            _fragment(1, power_words=["bold", "bold "]),
        ]

        merged = self.merger.merge(fragments, [1, 1])

        assert merged.style_signature.power_words == ["Bold", "bold", "bold "]

    def test_avg_words_pairwise_mean(self) -> None:
        fragments = [_fragment(1, avg=10.0), _fragment(1, avg=20.0), _fragment(1, avg=30.0)]

        merged = self.merger.merge(fragments, [1, 1, 1])

        # ((10 + 20) / 2 + 30) / 2
        assert merged.style_signature.avg_words_per_sentence == pytest.approx(22.5)

    def test_avg_words_skips_missing_values(self) -> None:
        fragments = [_fragment(1, avg=None), _fragment(1, avg=12.0)]

        merged = self.merger.merge(fragments, [1, 1])

        assert merged.style_signature.avg_words_per_sentence == 12.0

    def test_first_non_default_tone_wins(self) -> None:
        fragments = [
            _fragment(1, tone=DEFAULT_TONE),
            _fragment(1, tone="Energetic"),
            _fragment(1, tone="Calm"),
        ]

        merged = self.merger.merge(fragments, [1, 1, 1])

        assert merged.style_signature.tone == "Energetic"

    def test_all_default_tone(self) -> None:
        merged = self.merger.merge([_fragment(1, tone="")], [1])
        assert merged.style_signature.tone == DEFAULT_TONE

    def test_merged_json_is_camel_case(self) -> None:
        merged = self.merger.merge([_fragment(2)], [2])

        data = merged.to_json_dict()

        assert set(data) >= {"templates", "styleSignature", "transcripts"}
        assert data["templates"]["hooks"][1]["sourceIndex"] == 2
        assert "avgWordsPerSentence" in data["styleSignature"]

    def test_no_fragments(self) -> None:
        merged = self.merger.merge([], [])
        assert merged.templates.total == 0
        assert merged.style_signature.tone == DEFAULT_TONE

    def test_length_mismatch(self) -> None:
        with pytest.raises(ValueError):
            self.merger.merge([_fragment(1)], [1, 1])
