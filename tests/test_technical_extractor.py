"""
Tests for technical profile extraction.
"""

from conftest import make_conversation, make_conversation_with_roles
from memoryseed.technical_extractor import count_tech_mentions, extract_technical


def _convs(texts):
    return [
        make_conversation([text], conv_id=f"conv-{i}", title=f"Chat {i}")
        for i, text in enumerate(texts)
    ]


class TestStackDescriptions:
    """Test explicit stack statements."""

    def test_i_use_statement(self):
        conv = make_conversation(["I use React and TypeScript for every frontend."])
        results = extract_technical([conv])

        assert len(results) == 1
        assert results[0].text == "I use React and TypeScript for every frontend."
        assert results[0].category == "technical"
        assert results[0].confidence == "high"
        assert results[0].id == "tech-0"
        assert results[0].source_title == "Test Chat"

    def test_other_stack_phrases(self):
        conv = make_conversation([
            "At work we use Kubernetes for every service.",
            "My stack is Django with a Postgres database.",
            "I'm using a monorepo for all the services.",
            "I build with small composable shell scripts.",
            "I develop with two monitors and a laptop.",
            "I work with legacy code most of the time.",
        ])
        results = extract_technical([conv])

        assert len(results) == 6

    def test_stack_sentence_respects_noise_filter(self):
        conv = make_conversation(["I use vim."])
        assert extract_technical([conv]) == []

    def test_ignores_assistant_messages(self):
        conv = make_conversation_with_roles([
            ("assistant", "I use React and TypeScript for every frontend."),
        ])
        assert extract_technical([conv]) == []


class TestKeywordFrequency:
    """Test promotion of frequently mentioned technologies."""

    def test_promotes_keyword_seen_in_three_conversations(self):
        convs = _convs([
            "Why is my Python loop slow?",
            "Explain Python decorators.",
            "Python packaging question.",
        ])
        results = extract_technical(convs)

        assert len(results) == 1
        result = results[0]
        assert result.text == "Frequently uses Python (mentioned in 3 conversations)"
        assert result.confidence == "high"
        assert result.source_title == "multiple"
        assert result.source_timestamp is None

    def test_two_conversations_are_not_enough(self):
        convs = _convs([
            "Why is my Python loop slow?",
            "Explain Python decorators.",
        ])
        assert extract_technical(convs) == []

    def test_repeated_mentions_in_one_conversation_count_once(self):
        convs = [
            make_conversation(["Python here.", "More Python.", "Python again."], conv_id="a"),
            make_conversation(["Python basics."], conv_id="b"),
        ]
        assert count_tech_mentions(convs)["Python"] == 2
        assert extract_technical(convs) == []

    def test_repeats_do_not_block_promotion_at_three_conversations(self):
        convs = [
            make_conversation(
                ["Python here.", "More Python.", "Python again.", "Still Python."],
                conv_id="a", title="Chat a",
            ),
            make_conversation(["Python basics."], conv_id="b", title="Chat b"),
            make_conversation(["Explain Python decorators."], conv_id="c", title="Chat c"),
        ]
        results = extract_technical(convs)

        assert [r.text for r in results] == ["Frequently uses Python (mentioned in 3 conversations)"]

    def test_keeps_symbols_in_keywords(self):
        convs = _convs(["C++ templates confuse me."] * 3)
        results = extract_technical(convs)

        assert [r.text for r in results] == ["Frequently uses C++ (mentioned in 3 conversations)"]

    def test_java_does_not_match_inside_javascript(self):
        convs = _convs(["JavaScript closures confuse me."] * 3)
        counts = count_tech_mentions(convs)

        assert counts == {"JavaScript": 3}

    def test_matching_is_case_insensitive(self):
        counts = count_tech_mentions(_convs(["docker compose is handy."]))
        assert counts == {"Docker": 1}

    def test_mentions_are_ordered_by_first_appearance(self):
        counts = count_tech_mentions(_convs([
            "Redis cache warmup.",
            "Docker and Redis together.",
        ]))
        assert list(counts) == ["Redis", "Docker"]

    def test_custom_threshold(self):
        convs = _convs(["Explain Python decorators.", "Python packaging question."])
        results = extract_technical(convs, min_conversations=2)

        assert [r.text for r in results] == ["Frequently uses Python (mentioned in 2 conversations)"]


class TestOrdering:
    """Test candidate order and ids across both passes."""

    def test_stack_candidates_come_before_frequency_candidates(self):
        convs = _convs([
            "I use Python for all my data scripts.",
            "Python question here.",
            "More Python stuff today.",
        ])
        results = extract_technical(convs)

        assert [r.id for r in results] == ["tech-0", "tech-1"]
        assert results[0].text == "I use Python for all my data scripts."
        assert results[1].text == "Frequently uses Python (mentioned in 3 conversations)"

    def test_empty_input(self):
        assert extract_technical([]) == []
