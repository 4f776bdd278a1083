import pytest

from sylva.config import SylvaSettings
from sylva.models import SpeciesRecord
from sylva.pipeline import SylvaResolver

from .fakes import FakeEmbed


CATALOG_ROWS = [
    {"Species": "Copaifera langsdorffii", "Family": "Fabaceae",
     "EcosystemService": ["Medicinal"], "PartsUsed": ["bark"],
     "RelatedFunctionalTraits": ["resin ducts"], "embedding": [1.0, 0.0, 0.0]},
    {"Species": "Bertholletia excelsa", "Family": "Lecythidaceae",
     "EcosystemService": ["Food", "Raw Material"], "PartsUsed": ["seed", "trunk"],
     "RelatedFunctionalTraits": ["large seeds"], "embedding": [0.0, 1.0, 0.0]},
    {"Species": "Euterpe oleracea", "Family": "Arecaceae",
     "EcosystemService": ["Food"], "PartsUsed": ["fruit"],
     "RelatedFunctionalTraits": [], "embedding": [0.0, 0.9, 0.1]},
    {"Species": "Uncaria tomentosa", "Family": "Rubiaceae",
     "EcosystemService": ["Medicinal", "Food"], "PartsUsed": ["bark", "leaves"],
     "RelatedFunctionalTraits": [], "embedding": [0.7, 0.7, 0.0]},
    {"Species": "Ilex guayusa", "Family": "Aquifoliaceae",
     "EcosystemService": ["Medicinal"], "PartsUsed": ["leaves"],
     "RelatedFunctionalTraits": [], "embedding": [0.5, 0.0, 0.5]},
    {"Species": "Hevea brasiliensis", "Family": "Euphorbiaceae",
     "EcosystemService": ["Raw Material"], "PartsUsed": ["latex"],
     "RelatedFunctionalTraits": [], "embedding": [0.0, 0.0, 1.0]},
]


@pytest.fixture
def catalog():
    return [SpeciesRecord.model_validate(r) for r in CATALOG_ROWS]


@pytest.fixture
def settings(tmp_path):
    return SylvaSettings(
        assets_path=str(tmp_path),
        catalog_path=str(tmp_path / "data_with_embeddings.json"),
        enable_extraction=False,
        enable_images=False,
    )


@pytest.fixture
def make_resolver(settings, catalog):
    created = []

    def _make(embed=None, llm=None, images=None):
        r = SylvaResolver(
            settings,
            catalog=catalog,
            embed_fn=embed or FakeEmbed(),
            llm=llm,
            image_lookup=images,
        )
        created.append(r)
        return r

    yield _make
    for r in created:
        r.close()
