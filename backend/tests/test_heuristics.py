from docinsight.services.heuristics import extract_keywords, extract_named_entities


def test_entities_person_email_money_in_order():
    entities = extract_named_entities("Contact John Smith at john@example.com for $1,250.00")
    assert [(e.type, e.text) for e in entities] == [
        ("PERSON", "John Smith"),
        ("EMAIL", "john@example.com"),
        ("MONEY", "$1,250.00"),
    ]
    assert [e.confidence for e in entities] == [0.8, 0.95, 0.9]


def test_entities_keep_text_order_within_each_type():
    text = "Dear Alice Brown, wire $100 to Bob Green and $2,000.50 to Carol White."
    entities = extract_named_entities(text)
    assert [e.text for e in entities if e.type == "PERSON"] == ["Alice Brown", "Bob Green", "Carol White"]
    assert [e.text for e in entities if e.type == "MONEY"] == ["$100", "$2,000.50"]


def test_long_capitalised_run_is_paired():
    entities = extract_named_entities("Anna Maria Lopez Garcia signed")
    assert [e.text for e in entities] == ["Anna Maria", "Lopez Garcia"]


def test_no_entities_in_plain_lowercase_text():
    assert extract_named_entities("nothing to see here") == []


def test_stop_words_and_short_tokens_yield_nothing():
    assert extract_keywords("the and of a an is at") == []
    assert extract_keywords("") == []


def test_keywords_are_normalised_to_top_count():
    keywords = extract_keywords("alpha beta alpha gamma beta delta alpha")
    assert [k.text for k in keywords] == ["alpha", "beta", "gamma", "delta"]
    assert keywords[0].relevance == 1.0
    assert all(0 < k.relevance <= 1.0 for k in keywords)
    assert keywords[1].relevance == 2 / 3


def test_keyword_ties_keep_first_seen_order():
    keywords = extract_keywords("zeta omega zeta omega kappa")
    assert [k.text for k in keywords] == ["zeta", "omega", "kappa"]


def test_keywords_ignore_case_and_punctuation():
    keywords = extract_keywords("Budget, budget! BUDGET. which")
    assert [(k.text, k.relevance) for k in keywords] == [("budget", 1.0)]


def test_keywords_respect_top_n():
    text = " ".join(f"word{i}" for i in range(30))
    assert len(extract_keywords(text)) == 10
    assert len(extract_keywords(text, top_n=3)) == 3
