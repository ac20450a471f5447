from studymate_shared import CollectionKind

from app.services.routing import build_plan, plan_for, route

ALL = {CollectionKind.AUDIO, CollectionKind.NOTE, CollectionKind.PAST_PAPER}


def test_paper_question_routes_to_past_papers():
    assert route("What was in last year's paper?") == {CollectionKind.PAST_PAPER}


def test_audio_question_routes_to_audio():
    assert route("summarize the audio lecture") == {CollectionKind.AUDIO}


def test_multiple_keywords_are_all_included():
    assert route("compare the audio with the previous paper") == {
        CollectionKind.PAST_PAPER,
        CollectionKind.AUDIO,
    }


def test_no_keyword_falls_back_to_every_collection():
    assert route("what is photosynthesis?") == ALL


def test_matching_is_case_insensitive():
    assert route("Show me my NOTES on enzymes") == {CollectionKind.NOTE}
    assert route("Which QUESTION came up?") == {CollectionKind.NOTE}


def test_plan_uses_canonical_order_and_field_mappings():
    plan = build_plan({CollectionKind.NOTE, CollectionKind.AUDIO, CollectionKind.PAST_PAPER})

    assert plan.kinds == [CollectionKind.PAST_PAPER, CollectionKind.AUDIO, CollectionKind.NOTE]
    audio = plan.targets[1]
    assert (audio.text_field, audio.vector_field) == ("transcription", "embedding")
    note = plan.targets[2]
    assert (note.text_field, note.vector_field) == ("text", "vector")


def test_plan_for_question():
    assert plan_for("play back the audio").kinds == [CollectionKind.AUDIO]
