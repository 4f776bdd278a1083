import numpy as np
import pytest

from sylva.models import SpeciesRecord
from sylva.ranking import (
    EmbeddingError,
    catalog_matrix,
    cosine_similarity,
    embed_question,
    score_catalog,
    sort_by_similarity,
)

from .fakes import FakeEmbed


def _record(name, emb):
    return SpeciesRecord(species=name, embedding=emb)


def _ranked(vector, catalog):
    return sort_by_similarity(score_catalog(np.asarray(vector, dtype=float), catalog))


def test_cosine_similarity():
    matrix = np.array([[2.0, 0.0], [0.0, 3.0], [-1.0, 0.0], [0.0, 0.0]])
    scores = cosine_similarity(matrix, np.array([1.0, 0.0]))
    assert scores.tolist() == pytest.approx([1.0, 0.0, -1.0, 0.0])


def test_zero_norm_question_scores_zero(catalog):
    scored = score_catalog(np.zeros(3), catalog)
    assert all(s.similarity == 0.0 for s in scored)


def test_score_catalog_keeps_catalog_order(catalog):
    scored = score_catalog(np.array([0.0, 0.0, 1.0]), catalog)
    assert [s.species for s in scored] == [c.species for c in catalog]
    assert scored[-1].similarity == pytest.approx(1.0)
    assert scored[0].similarity == pytest.approx(0.0)


def test_precomputed_matrix_gives_same_scores(catalog):
    vec = np.array([0.3, 0.4, 0.5])
    matrix = catalog_matrix(catalog)
    assert matrix.shape == (6, 3)
    with_matrix = [s.similarity for s in score_catalog(vec, catalog, matrix)]
    without = [s.similarity for s in score_catalog(vec, catalog)]
    assert with_matrix == pytest.approx(without)


def test_scored_records_keep_catalog_fields(catalog):
    scored = score_catalog(np.array([1.0, 0.0, 0.0]), catalog)[0]
    body = scored.to_response()
    assert body["Species"] == "Copaifera langsdorffii"
    assert body["PartsUsed"] == ["bark"]
    assert body["similarity"] == pytest.approx(1.0)
    assert "embedding" not in body
    assert "images" not in body


def test_sort_descending(catalog):
    ranked = _ranked([0.0, 1.0, 0.0], catalog)
    assert ranked[0].species == "Bertholletia excelsa"
    assert ranked[1].species == "Euterpe oleracea"
    sims = [r.similarity for r in ranked]
    assert sims == sorted(sims, reverse=True)


def test_ties_keep_catalog_order_and_are_reproducible():
    catalog = [_record(f"sp{i}", [1.0, 1.0]) for i in range(5)] + [_record("best", [1.0, 0.0])]
    first = _ranked([1.0, 0.0], catalog)
    second = _ranked([1.0, 0.0], catalog)

    assert [r.species for r in first] == ["best", "sp0", "sp1", "sp2", "sp3", "sp4"]
    assert [r.species for r in first] == [r.species for r in second]


def test_ranking_does_not_mutate_catalog(catalog):
    before = [c.species for c in catalog]
    _ranked([0.0, 0.0, 1.0], catalog)
    assert [c.species for c in catalog] == before


def test_dimension_mismatch_is_rejected(catalog):
    with pytest.raises(ValueError, match="dimension mismatch"):
        score_catalog(np.array([1.0, 0.0]), catalog)


def test_embed_question_wraps_provider_errors():
    with pytest.raises(EmbeddingError):
        embed_question("anything", FakeEmbed(error=RuntimeError("quota exceeded")))


def test_embed_question_single_call():
    embed = FakeEmbed(vector=[0.1, 0.2, 0.3])
    vec = embed_question("trees", embed)
    assert embed.calls == [["trees"]]
    assert vec.tolist() == pytest.approx([0.1, 0.2, 0.3])
