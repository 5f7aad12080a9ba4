import pytest

from agrolens.core.config import DEFAULT_DISEASE_LABELS
from agrolens.services.disease_info import (
    get_disease_description,
    get_disease_info,
    get_display_category,
    get_recommendations,
)


@pytest.mark.parametrize("label", DEFAULT_DISEASE_LABELS)
def test_every_class_label_has_specific_text(label):
    assert "consult with an agricultural expert for proper diagnosis" not in get_disease_description(label)
    assert len(get_recommendations(label)) >= 2
    assert get_display_category(label) == "disease"


def test_lookup_is_case_insensitive_and_resolves_aliases():
    assert get_disease_description("BROWN SPOT") == get_disease_description("Brown Spot")
    assert get_disease_description("rice blast") == get_disease_description("Leaf Blast")
    assert get_recommendations("Tungro Virus") == get_recommendations("Tungro")
    assert get_display_category("tungro virus") == "disease"


def test_unknown_and_error_entries():
    assert "Unable to identify" in get_disease_description("Unknown Disease")
    assert get_display_category("Unknown Disease") == "unknown"
    assert get_display_category("Error") == "error"


def test_unrecognised_name_falls_back():
    assert get_disease_description("Healthy").startswith("Unknown condition detected")
    assert get_display_category("Healthy") == "other"
    assert get_recommendations("Healthy")


def test_recommendations_are_copies():
    recs = get_recommendations("Brown Spot")
    recs.clear()
    assert get_recommendations("Brown Spot")


def test_disease_info_bundle():
    info = get_disease_info("Sheath Blight")
    assert info.disease == "Sheath Blight"
    assert "Rhizoctonia solani" in info.description
    assert info.display_category == "disease"
