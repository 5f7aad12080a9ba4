from __future__ import annotations

from typing import Dict, List

from agrolens.schemas.diagnosis import DiseaseInfo

# Keys are lower-case canonical names; aliases map alternative labels onto them.
_ALIASES: Dict[str, str] = {
    "rice blast": "leaf blast",
    "blast": "leaf blast",
    "tungro virus": "tungro",
    "bacterial blight": "bacterial leaf blight",
}

_DESCRIPTIONS: Dict[str, str] = {
    "bacterial leaf blight": (
        "Bacterial leaf blight is a serious disease caused by Xanthomonas oryzae pv. oryzae. "
        "It causes wilting and yellowing of leaves, significantly reducing rice yield."
    ),
    "leaf blast": (
        "Rice blast is a fungal disease caused by Magnaporthe oryzae. It can cause significant "
        "yield losses by destroying leaves, stems, and panicles."
    ),
    "sheath blight": (
        "Sheath blight is caused by the fungus Rhizoctonia solani. It affects the sheath and leaves, "
        "causing lesions that can reduce photosynthesis and yield."
    ),
    "tungro": (
        "Tungro virus is transmitted by green leafhoppers. It causes stunted growth, yellowing of "
        "leaves, and reduced tillering in rice plants."
    ),
    "brown spot": (
        "Brown spot is a fungal disease caused by Bipolaris oryzae. It appears as brown lesions on "
        "leaves and can reduce photosynthesis and yield."
    ),
    "unknown disease": (
        "Unable to identify the specific condition. The symptoms may be unclear or the disease may "
        "not be in our database."
    ),
    "error": "An error occurred during analysis. Please try again or consult with an agricultural expert.",
}

_DEFAULT_DESCRIPTION = (
    "Unknown condition detected. Please consult with an agricultural expert for proper diagnosis "
    "and treatment."
)

_RECOMMENDATIONS: Dict[str, List[str]] = {
    "bacterial leaf blight": [
        "Drain the field and avoid prolonged flooding during outbreaks.",
        "Avoid excess nitrogen fertilizer; split applications instead.",
        "Remove and destroy infected stubble and volunteer plants after harvest.",
        "Plant resistant varieties in the next season.",
    ],
    "leaf blast": [
        "Apply a recommended fungicide such as tricyclazole at the first sign of lesions.",
        "Avoid excessive nitrogen and keep the field evenly flooded.",
        "Use certified, disease-free seed and resistant varieties.",
    ],
    "sheath blight": [
        "Reduce plant density to improve air circulation around the canopy.",
        "Apply a recommended fungicide such as validamycin or hexaconazole if lesions spread upward.",
        "Remove weeds and crop residues that harbour the fungus.",
    ],
    "tungro": [
        "Control green leafhoppers with recommended insecticides or light traps.",
        "Rogue out and destroy infected plants to limit virus spread.",
        "Synchronise planting with neighbouring fields and use resistant varieties.",
    ],
    "brown spot": [
        "Correct soil nutrient deficiencies, especially potassium and silicon.",
        "Treat seed with a recommended fungicide before sowing.",
        "Apply a foliar fungicide such as mancozeb when infection is severe.",
    ],
    "unknown disease": [
        "Retake the photo in good light with a single leaf filling the frame.",
        "Compare the symptoms with nearby plants and monitor for changes.",
        "Consult a local agricultural extension officer for a field inspection.",
    ],
    "error": [
        "Retry the analysis.",
        "If the problem persists, consult with an agricultural expert.",
    ],
}

_DEFAULT_RECOMMENDATIONS = [
    "Isolate affected plants where possible.",
    "Consult with an agricultural expert for proper diagnosis and treatment.",
]

_DISEASE_KEYS = {"bacterial leaf blight", "leaf blast", "sheath blight", "tungro", "brown spot"}


def _canonical(disease: str) -> str:
    key = disease.strip().lower()
    return _ALIASES.get(key, key)


def get_disease_description(disease: str) -> str:
    return _DESCRIPTIONS.get(_canonical(disease), _DEFAULT_DESCRIPTION)


def get_recommendations(disease: str) -> List[str]:
    return list(_RECOMMENDATIONS.get(_canonical(disease), _DEFAULT_RECOMMENDATIONS))


def get_display_category(disease: str) -> str:
    """Category a UI uses to pick colour and icon: red warning for known
    diseases, orange for unknown/error, yellow for anything else."""
    key = _canonical(disease)
    if key in _DISEASE_KEYS:
        return "disease"
    if key == "unknown disease":
        return "unknown"
    if key == "error":
        return "error"
    return "other"


def get_disease_info(disease: str) -> DiseaseInfo:
    return DiseaseInfo(
        disease=disease,
        description=get_disease_description(disease),
        recommendations=get_recommendations(disease),
        display_category=get_display_category(disease),
    )
