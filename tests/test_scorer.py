import pytest

from core.errors import PreferenceUnavailableError
from modules.recommendation.preference_resolver import PreferenceResolver
from modules.recommendation.scorer import Scorer
from schemas.context import Context
from schemas.preferences import PreferenceProfile

from conftest import make_destination


@pytest.fixture
def scorer():
    return Scorer()


def _summary(ranked):
    return [(s.destination_id, s.score, s.reasoning.to_dict()) for s in ranked]


def test_final_score_formula(scorer, museum_lover):
    dest = make_destination("d1", categories={"museums"}, visit_duration=90, popularity=4.0)

    [scored] = scorer.score_destinations([dest], museum_lover)

    # 0.9 × 0.6 + 0.8 × 0.4
    assert scored.score == pytest.approx(0.86)
    assert scored.reasoning.preference_score == pytest.approx(0.9)
    assert scored.reasoning.popularity_score == pytest.approx(0.8)


def test_weights_are_configurable(museum_lover):
    dest = make_destination("d1", categories={"museums"}, visit_duration=90, popularity=5.0)

    [scored] = Scorer(preference_weight=1.0, popularity_weight=0.0).score_destinations([dest], museum_lover)

    assert scored.score == pytest.approx(0.9)


def test_ranking_is_descending(scorer, museum_lover):
    low = make_destination("low", popularity=1.0)
    high = make_destination("high", categories={"museums"}, visit_duration=90, popularity=5.0)

    ranked = scorer.score_destinations([low, high], museum_lover)

    assert [s.destination_id for s in ranked] == ["high", "low"]


def test_ties_keep_input_order(scorer, museum_lover):
    a = make_destination("a", popularity=3.0)
    b = make_destination("b", popularity=3.0)

    assert [s.destination_id for s in scorer.score_destinations([a, b], museum_lover)] == ["a", "b"]
    assert [s.destination_id for s in scorer.score_destinations([b, a], museum_lover)] == ["b", "a"]


def test_scoring_is_deterministic(scorer, museum_lover):
    dests = [
        make_destination(f"d{i}", categories={"museums"} if i % 2 else {"parks"},
                         cost_level=1 + i % 5, visit_duration=30 * (i + 1), popularity=i % 5,
                         attributes={"indoor": i % 3 == 0, "outdoor": i % 3 == 1})
        for i in range(8)
    ]
    context = Context(weather="rainy", time_of_day="afternoon", day_of_week=6, available_time_minutes=240)

    first = scorer.score_destinations(dests, museum_lover, context)
    second = scorer.score_destinations(dests, museum_lover, context)

    assert _summary(first) == _summary(second)


def test_context_adjusts_final_score(scorer, museum_lover):
    dest = make_destination("d1", categories={"museums"}, visit_duration=90, popularity=4.0,
                            attributes={"indoor": True})

    [scored] = scorer.score_destinations([dest], museum_lover, Context(weather="rainy"))

    assert scored.score == pytest.approx(0.86 * 1.4)


def test_learned_preferences_take_precedence(memory, profile_tool, destination_tool):
    memory.set_learned_preferences("u1", PreferenceProfile(categories=frozenset({"beach"})))
    profile_tool.get_preferences.return_value = PreferenceProfile(categories=frozenset({"museums"}))
    destination_tool.get_batch.return_value = [
        make_destination("museum", categories={"museums"}),
        make_destination("beach", categories={"beach"}),
    ]
    scorer = Scorer(resolver=PreferenceResolver(memory, profile_tool), destination_tool=destination_tool)

    ranked = scorer.score("u1", ["museum", "beach"])

    assert ranked[0].destination_id == "beach"
    profile_tool.get_preferences.assert_not_called()


def test_profile_service_used_without_learned(memory, profile_tool, destination_tool):
    profile_tool.get_preferences.return_value = PreferenceProfile(categories=frozenset({"museums"}))
    destination_tool.get_batch.return_value = [
        make_destination("beach", categories={"beach"}),
        make_destination("museum", categories={"museums"}),
    ]
    scorer = Scorer(resolver=PreferenceResolver(memory, profile_tool), destination_tool=destination_tool)

    ranked = scorer.score("u1", ["beach", "museum"])

    assert ranked[0].destination_id == "museum"


def test_new_user_gets_neutral_preference(memory, profile_tool, destination_tool):
    destination_tool.get_batch.return_value = [make_destination("d1", popularity=5.0)]
    scorer = Scorer(resolver=PreferenceResolver(memory, profile_tool), destination_tool=destination_tool)

    [scored] = scorer.score("new-user", ["d1"])

    assert scored.reasoning.preference_score == 0.5
    assert scored.score == pytest.approx(0.5 * 0.6 + 1.0 * 0.4)


def test_unavailable_preferences_fall_back_to_popularity(memory, profile_tool, destination_tool):
    profile_tool.get_preferences.side_effect = PreferenceUnavailableError("down")
    destination_tool.get_batch.return_value = [
        make_destination("quiet", categories={"museums"}, popularity=1.0),
        make_destination("famous", popularity=4.5),
    ]
    scorer = Scorer(resolver=PreferenceResolver(memory, profile_tool), destination_tool=destination_tool)

    ranked = scorer.score("u1", ["quiet", "famous"])

    assert [s.destination_id for s in ranked] == ["famous", "quiet"]
    assert ranked[0].score == pytest.approx(0.9)
    assert ranked[0].reasoning.preference_factors[0].type == "default_preferences"


def test_missing_catalog_entries_are_dropped(memory, profile_tool, destination_tool):
    destination_tool.get_batch.return_value = [make_destination("b"), make_destination("a")]
    scorer = Scorer(resolver=PreferenceResolver(memory, profile_tool), destination_tool=destination_tool)

    ranked = scorer.score("u1", ["a", "gone", "b"])

    assert [s.destination_id for s in ranked] == ["a", "b"]
