"""Response schema for the home safety vision model.

ASSESSMENT_OUTPUT_SCHEMA is a JSON Schema describing every field, type and
enum the model must populate. It is passed to the chat model as a
``json_schema`` response format so the output is structurally constrained.
"""

import copy
from typing import Any, Dict

from services.prompt_builder import (
    EQUIPMENT_CATEGORIES,
    HAZARD_CATEGORIES,
    MODIFICATION_CATEGORIES,
    ROOM_TYPES,
)

SCHEMA_NAME = "home_safety_assessment"


def _string(**extra) -> Dict[str, Any]:
    return {"type": "string", **extra}


def _number(**extra) -> Dict[str, Any]:
    return {"type": "number", **extra}


def _integer(**extra) -> Dict[str, Any]:
    return {"type": "integer", **extra}


def _boolean() -> Dict[str, Any]:
    return {"type": "boolean"}


def _array(items: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": "array", "items": items}


def _object(**properties) -> Dict[str, Any]:
    return {"type": "object", "properties": properties}


def _enum(values) -> Dict[str, Any]:
    return {"type": "string", "enum": list(values)}


def _build_schema() -> Dict[str, Any]:
    string_list = _array(_string())

    return _object(
        confidence=_object(
            overall=_number(minimum=0, maximum=100),
            imageQuality=_number(minimum=0, maximum=100),
            hazardDetection=_number(minimum=0, maximum=100),
            recommendations=_number(minimum=0, maximum=100),
        ),
        detectedRooms=_array(_object(
            roomType=_enum(ROOM_TYPES),
            imageIds=string_list,
            confidence=_number(minimum=0, maximum=100),
        )),
        detectedHazards=_array(_object(
            id=_string(),
            imageId=_string(),
            category=_enum(HAZARD_CATEGORIES),
            description=_string(),
            severity=_integer(minimum=0, maximum=4),
            location=_object(
                room=_string(),
                specificArea=_string(),
            ),
            affectsADLs=string_list,
            confidence=_number(minimum=0, maximum=100),
        )),
        existingAccessibility=_array(_object(
            feature=_string(),
            imageId=_string(),
            location=_string(),
            condition=_enum(("good", "fair", "poor")),
        )),
        recommendations=_array(_object(
            id=_string(),
            category=_enum(MODIFICATION_CATEGORIES),
            subcategory=_string(),
            description=_string(),
            room=_string(),
            specificLocation=_string(),
            addressesHazard=_string(),
            affectedADLs=string_list,
            affectedIADLs=string_list,
            fallsRiskReduction=_enum(("none", "low", "moderate", "high")),
            priority=_integer(minimum=1, maximum=4),
            priorityJustification=_string(),
            estimatedCost=_object(
                materials=_number(minimum=0),
                labor=_number(minimum=0),
                total=_number(minimum=0),
            ),
            modificationType=_enum(("maintenance", "rehabilitation")),
            requiresLicensedContractor=_boolean(),
            requiresPermit=_boolean(),
            requiresEnvironmentalReview=_boolean(),
            specifications=_string(),
            productRecommendations=string_list,
        )),
        equipmentSuggestions=_array(_object(
            id=_string(),
            category=_enum(EQUIPMENT_CATEGORIES),
            name=_string(),
            description=_string(),
            addressesADL=string_list,
            addressesIADL=string_list,
            reducesRisk=_string(),
            estimatedCost=_number(minimum=0),
            requiresInstallation=_boolean(),
            requiresTraining=_boolean(),
            priority=_integer(minimum=1, maximum=4),
        )),
        summary=_object(
            overallSafetyScore=_number(minimum=0, maximum=100),
            criticalIssuesCount=_integer(minimum=0),
            primaryRiskAreas=string_list,
            estimatedTotalCost=_object(
                low=_number(minimum=0),
                high=_number(minimum=0),
            ),
            topThreeRecommendations=string_list,
        ),
        limitations=string_list,
        additionalPhotosNeeded=string_list,
        requiresProfessionalAssessment=_boolean(),
        professionalAssessmentReason=_string(),
    )


ASSESSMENT_OUTPUT_SCHEMA: Dict[str, Any] = _build_schema()


def get_response_format() -> Dict[str, Any]:
    """OpenAI ``json_schema`` response format wrapping the output schema.

    Returns a fresh copy on every call so callers cannot mutate the shared schema.
    """
    return {
        "type": "json_schema",
        "json_schema": {
            "name": SCHEMA_NAME,
            "schema": copy.deepcopy(ASSESSMENT_OUTPUT_SCHEMA),
            "strict": False,
        },
    }
