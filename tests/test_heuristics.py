from sylva.heuristics import heuristic_parse


def test_service_takes_precedence_over_part():
    q = heuristic_parse("Which trees use the bark as medicine?")
    assert q.ecosystem_service == "Medicinal"
    assert q.part_used is None


def test_part_detected_when_no_service():
    q = heuristic_parse("Which species use the seeds?")
    assert q.ecosystem_service is None
    assert q.part_used == "seed"
    assert q.only is None


def test_only_leaves_phrase():
    q = heuristic_parse("Show me trees that only the leaves are used.")
    assert q.only is True
    assert q.part_used == "leaves"
    assert q.species is None


def test_only_phrase_normalizes_captured_part():
    q = heuristic_parse("List species where roots are the only part used")
    assert q.only is True
    assert q.part_used == "root"


def test_only_phrase_keeps_unknown_token():
    q = heuristic_parse("trees where the only value in PartsUsed is thorns")
    assert q.only is True
    assert q.part_used == "thorns"


def test_only_phrase_combines_with_service():
    q = heuristic_parse("medicinal trees where parts used is only bark")
    assert q.ecosystem_service == "Medicinal"
    assert q.part_used == "bark"
    assert q.only is True


def test_generic_question_is_identity_query():
    q = heuristic_parse("Show me all the trees")
    assert q.species is None
    assert q.ecosystem_service is None
    assert q.part_used is None
    assert q.only is None
    assert q.and_ is None
