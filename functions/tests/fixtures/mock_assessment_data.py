"""Mock assessment data fixtures for testing.

Provides a wizard submission for a 74-year-old client with a recent bathroom
fall, the raw JSON a vision model returns for it, and an over-budget variant.
"""

import copy
from typing import Any, Dict, List


# 8-byte PNG signature; enough for the pipeline, which never decodes pixels
INLINE_PNG = "data:image/png;base64,iVBORw0KGgo="
INLINE_PNG_BYTES = b"\x89PNG\r\n\x1a\n"


# =============================================================================
# SUBMISSION REQUESTS
# =============================================================================


def get_sample_images() -> List[Dict[str, Any]]:
    return [
        {"id": "img-1", "url": INLINE_PNG, "room": "bathroom", "userNotes": "Tub is slippery"},
        {"id": "img-2", "url": INLINE_PNG, "room": "stairs"},
    ]


SAMPLE_FULL_ASSESSMENT: Dict[str, Any] = {
    "clientDemographics": {
        "firstName": "Mary",
        "lastName": "Johnson",
        "age": 74,
        "livesAlone": True,
        "address": {
            "street": "12 Elm St",
            "city": "Dayton",
            "state": "OH",
            "zipCode": "45402",
        },
    },
    "eligibility": {
        "isHomeowner": True,
        "householdIncome": 64000,
        "areaMedianIncome": 80000,
        "isPrimaryResidence": True,
        # Stale client-side value, recomputed on submission
        "isEligible": False,
    },
    "propertyCharacteristics": {
        "homeType": "single_family",
        "yearBuilt": 1958,
        "numberOfStories": 2,
    },
    "adlAssessment": {
        "bathing": {"difficultyLevel": 2, "needsHelp": True, "hazardsIdentified": ["slippery tub"]},
        "transferring": {"difficultyLevel": 1},
        "walking": {"difficultyLevel": 1, "notes": "Uses cane indoors"},
        "totalScore": 0,
    },
    "iadlAssessment": {
        "preparingMeals": {"difficultyLevel": 2},
        "shopping": {"difficultyLevel": 2},
        "laundry": {"difficultyLevel": 3, "hazardsIdentified": ["basement stairs"]},
    },
    "mobilityAssessment": {
        "usesCane": {"frequency": 3, "indoorUse": True},
        "balanceIssues": True,
        "canClimbFlightOfStairs": False,
    },
    "fallsRiskAssessment": {
        "hasFallenPastYear": True,
        "fallDetails": [{"location": "bathroom", "causedInjury": True}],
        "riskFactors": {"historyOfFalls": True, "balanceProblems": True},
    },
}


def get_sample_wizard_request() -> Dict[str, Any]:
    """Submission body carrying both the legacy flat fields and the nested bundle."""
    return {
        "images": get_sample_images(),
        "selfReportedInfo": {
            "name": "Legacy Name",
            "address": "1 Old Rd",
            "age": 70,
            "livesAlone": False,
            "primaryConcerns": ["bathroom safety"],
            "currentMedicalConditions": ["arthritis"],
        },
        "propertyInfo": {"type": "condo", "yearBuilt": 1990, "stories": 1},
        "assessmentContext": {"programType": "OAHMP", "budgetCap": 5000},
        "fullAssessment": copy.deepcopy(SAMPLE_FULL_ASSESSMENT),
    }


def get_minimal_request() -> Dict[str, Any]:
    return {"images": [{"id": "img-1", "url": INLINE_PNG}]}


def get_sample_complete_request() -> Dict[str, Any]:
    return {
        "images": get_sample_images(),
        "client": {
            "name": "Mary Johnson",
            "address": "12 Elm St, Dayton, OH 45402",
            "age": 74,
            "livesAlone": True,
            "recentFalls": True,
            "medicalConditions": ["arthritis"],
        },
        "property": {"type": "single_family", "yearBuilt": 1958, "stories": 2},
        "config": {"programType": "OAHMP", "budgetCap": 5000},
        "report": {
            "assessorName": "Jane Smith, OTR/L",
            "organizationName": "Dayton Area Agency on Aging",
            "caseNumber": "OAHMP-2025-0042",
        },
    }


# =============================================================================
# MODEL OUTPUT
# =============================================================================


def get_sample_raw_output() -> Dict[str, Any]:
    """Model JSON with three recommendations totalling $4,000."""
    return {
        "confidence": {"overall": 82, "imageQuality": 75, "hazardDetection": 80, "recommendations": 78},
        "detectedRooms": [
            {"roomType": "bathroom", "imageIds": ["img-1"], "confidence": 90},
            {"roomType": "stairs", "imageIds": ["img-2"], "confidence": 85},
        ],
        "detectedHazards": [
            {
                "id": "hazard-1",
                "imageId": "img-1",
                "category": "grab_bars_missing",
                "description": "No grab bars at tub or toilet",
                "severity": 4,
                "location": {"room": "bathroom", "specificArea": "tub"},
                "affectsADLs": ["bathing", "toileting"],
                "confidence": 88,
            },
            {
                "id": "hazard-2",
                "imageId": "img-2",
                "category": "lighting",
                "description": "Stairwell lighting is dim",
                "severity": 3,
                "location": {"room": "stairs"},
                "affectsADLs": ["walking"],
                "confidence": 80,
            },
        ],
        "existingAccessibility": [
            {"feature": "Handrail", "imageId": "img-2", "location": "stairs, left side", "condition": "fair"},
        ],
        "recommendations": [
            {
                "id": "rec-1",
                "category": "grab_bars",
                "subcategory": "tub",
                "description": "Install two 24-inch grab bars at the tub",
                "room": "bathroom",
                "addressesHazard": "hazard-1",
                "affectedADLs": ["bathing"],
                "fallsRiskReduction": "high",
                "priority": 4,
                "priorityJustification": "Client fell in the bathroom this year",
                "estimatedCost": {"materials": 150, "labor": 250, "total": 400},
                "modificationType": "maintenance",
                "requiresLicensedContractor": False,
                "requiresPermit": False,
                "productRecommendations": ["Moen 24-inch grab bar"],
            },
            {
                "id": "rec-2",
                "category": "bathroom",
                "subcategory": "tub_cut",
                "description": "Convert tub to walk-in shower",
                "room": "bathroom",
                "addressesHazard": "hazard-1",
                "priority": 3,
                "estimatedCost": {"materials": 1500, "labor": 1500, "total": 3000},
                "modificationType": "rehabilitation",
                "requiresLicensedContractor": True,
                "requiresPermit": True,
            },
            {
                "id": "rec-3",
                "category": "lighting",
                "description": "Add LED stair lighting with switches at top and bottom",
                "room": "stairs",
                "addressesHazard": "hazard-2",
                "priority": 2,
                "estimatedCost": {"materials": 300, "labor": 300, "total": 600},
                "modificationType": "maintenance",
            },
        ],
        "equipmentSuggestions": [
            {
                "id": "equip-1",
                "category": "bathroom_small",
                "name": "Shower chair",
                "description": "Adjustable shower chair with back",
                "addressesADL": ["bathing"],
                "estimatedCost": 60,
                "priority": 3,
            },
        ],
        "summary": {
            "overallSafetyScore": 58,
            "criticalIssuesCount": 1,
            "primaryRiskAreas": ["bathroom", "stairs"],
            "estimatedTotalCost": {"low": 0, "high": 0},
            "topThreeRecommendations": [
                "Install grab bars at the tub",
                "Convert tub to walk-in shower",
                "Improve stair lighting",
            ],
        },
        "limitations": ["Night-time lighting could not be assessed"],
        "additionalPhotosNeeded": ["Front entrance steps"],
        "requiresProfessionalAssessment": True,
        "professionalAssessmentReason": "Recent fall with injury",
    }


def get_over_budget_raw_output() -> Dict[str, Any]:
    """Same report with recommendations totalling $6,200 against a $5,000 cap."""
    raw = get_sample_raw_output()
    raw["recommendations"] = [
        {"id": "rec-1", "category": "bathroom", "priority": 4, "estimatedCost": {"total": 3000}},
        {"id": "rec-2", "category": "ramps", "priority": 3, "estimatedCost": {"total": 2000}},
        {"id": "rec-3", "category": "lighting", "priority": 2, "estimatedCost": {"total": 1200}},
    ]
    return raw
