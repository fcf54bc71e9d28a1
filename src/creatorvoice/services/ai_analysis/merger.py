"""Fold per-batch analysis fragments into one combined analysis."""

from creatorvoice.models.analysis import (
    DEFAULT_TONE,
    TEMPLATE_CATEGORIES,
    AnalysisFragment,
    CombinedAnalysis,
    StyleSignature,
    TemplateItem,
    TemplateSet,
    TranscriptBreakdown,
)


def _union_append(merged: list[str], seen: set[str], incoming: list[str]) -> None:
    for phrase in incoming:
        if phrase not in seen:
            seen.add(phrase)
            merged.append(phrase)


class FragmentMerger:
    """Merges batch fragments into a globally indexed CombinedAnalysis.

    Fragments are folded in batch order with a running offset:

    - template ``sourceIndex`` and breakdown ``index`` values become
      ``offset + local index`` (``offset + position`` when the model left
      the index out);
    - templates are never deduplicated, even when patterns are identical;
    - power words, filler phrases and transition phrases are unioned by
      exact string equality, keeping first-seen order;
    - ``avgWordsPerSentence`` is the pairwise running mean of batch values;
    - the first batch reporting a non-default tone sets the tone;
    - the offset then advances by the batch's input transcript count, so a
      batch that under-reports items never shifts later batches.
    """

    def merge(
        self,
        fragments: list[AnalysisFragment],
        batch_sizes: list[int],
    ) -> CombinedAnalysis:
        """Merge fragments produced for consecutive batches.

        Args:
            fragments: One fragment per batch, in batch order.
            batch_sizes: Number of transcripts fed to each batch.

        Returns:
            The combined analysis.

        Raises:
            ValueError: If the two lists differ in length or a size is negative.
        """
        if len(fragments) != len(batch_sizes):
            raise ValueError(
                f"Got {len(fragments)} fragment(s) for {len(batch_sizes)} batch(es)"
            )
        if any(size < 0 for size in batch_sizes):
            raise ValueError(f"Batch sizes must be non-negative: {batch_sizes}")

        templates: dict[str, list[TemplateItem]] = {name: [] for name in TEMPLATE_CATEGORIES}
        transcripts: list[TranscriptBreakdown] = []

        phrase_sets: dict[str, tuple[list[str], set[str]]] = {
            "power_words": ([], set()),
            "filler_phrases": ([], set()),
            "transition_phrases": ([], set()),
        }
        avg_words: float | None = None
        tone = DEFAULT_TONE

        global_offset = 0
        for fragment, size in zip(fragments, batch_sizes):
            for name in TEMPLATE_CATEGORIES:
                for position, item in enumerate(fragment.templates.category(name), start=1):
                    local = item.source_index if item.source_index is not None else position
                    templates[name].append(
                        item.model_copy(update={"source_index": global_offset + local})
                    )

            for position, entry in enumerate(fragment.transcripts, start=1):
                local = entry.index if entry.index is not None else position
                transcripts.append(entry.model_copy(update={"index": global_offset + local}))

            signature = fragment.style_signature
            for field_name, (merged, seen) in phrase_sets.items():
                _union_append(merged, seen, getattr(signature, field_name))

            if signature.avg_words_per_sentence is not None:
                if avg_words is None:
                    avg_words = signature.avg_words_per_sentence
                else:
                    avg_words = (avg_words + signature.avg_words_per_sentence) / 2

            if tone == DEFAULT_TONE and signature.tone != DEFAULT_TONE:
                tone = signature.tone

            global_offset += size

        return CombinedAnalysis(
            templates=TemplateSet(**templates),
            style_signature=StyleSignature(
                power_words=phrase_sets["power_words"][0],
                filler_phrases=phrase_sets["filler_phrases"][0],
                transition_phrases=phrase_sets["transition_phrases"][0],
                avg_words_per_sentence=avg_words,
                tone=tone,
            ),
            transcripts=transcripts,
        )
