"""Prompt construction for the home safety vision model.

FEDERAL_ASSESSMENT_SYSTEM_PROMPT is the fixed domain-knowledge document sent
with every request (program framework, taxonomies, scales, 2024 cost table).
build_prompt renders one AssessmentInput into the per-request user prompt.
"""

from types import MappingProxyType
from typing import List, Optional

from models.assessment_input import AssessmentInput, FullAssessment, SelfReportedInfo, PropertyInfo
from models.assessment_output import (
    EquipmentCategory,
    HazardCategory,
    ModificationCategory,
    RoomType,
)
from utils.formatting import format_currency

# =============================================================================
# TAXONOMIES
# =============================================================================

HAZARD_CATEGORIES = tuple(category.value for category in HazardCategory)
MODIFICATION_CATEGORIES = tuple(category.value for category in ModificationCategory)
EQUIPMENT_CATEGORIES = tuple(category.value for category in EquipmentCategory)
ROOM_TYPES = tuple(room.value for room in RoomType)

MAINTENANCE_CATEGORIES = (
    "Grab bars installation",
    "Handrails repair/installation",
    "Non-slip strips/mats",
    "Lever door handles",
    "Lighting improvements",
    "Smoke/CO detector installation",
    "Threshold modifications",
    "Cabinet hardware changes",
)

REHABILITATION_CATEGORIES = (
    "Tub cuts or walk-in shower conversion",
    "Comfort-height toilet installation",
    "Ramp construction",
    "Door widening",
    "Flooring replacement",
    "Stair lift installation",
)

SEVERITY_SCALE = MappingProxyType({
    0: "None",
    1: "Low",
    2: "Moderate",
    3: "High",
    4: "Critical",
})

PRIORITY_SCALE = MappingProxyType({
    1: "Low",
    2: "Medium",
    3: "High",
    4: "Urgent",
})

# 2024 price guidance, grouped by area
COST_REFERENCE = MappingProxyType({
    "Bathroom Modifications": (
        "Grab bars (each): $50-150 materials, $75-150 labor",
        "Raised toilet seat: $30-80",
        "Comfort-height toilet: $200-400 + $150-300 labor",
        "Tub cut: $400-800",
        "Walk-in shower conversion: $2,500-5,000",
        "Handheld showerhead: $30-100 + $50-100 labor",
        "Non-slip strips: $20-50",
        "Shower chair: $40-150",
    ),
    "General Safety": (
        "Smoke detector: $20-50 each",
        "CO detector: $30-60 each",
        "Motion-sensor lights: $25-75 each",
        "Lever door handles: $20-50 each + $30-50 labor",
        "Threshold ramps: $50-200",
    ),
    "Accessibility": (
        "Interior ramp (per linear foot): $100-200",
        "Exterior ramp (per linear foot): $150-300",
        "Door widening: $500-1,500",
        "Stair railings (per linear foot): $50-100",
    ),
    "Flooring": (
        "Non-slip treatment: $2-5 per sq ft",
        "Vinyl/LVP flooring: $3-8 per sq ft + labor",
        "Carpet removal: $1-2 per sq ft",
    ),
})


def _bullets(items) -> str:
    return "\n".join(f"- {item}" for item in items)


def _cost_reference_section() -> str:
    return "\n\n".join(
        f"### {area}\n{_bullets(lines)}" for area, lines in COST_REFERENCE.items()
    )


FEDERAL_ASSESSMENT_SYSTEM_PROMPT = f"""You are an expert home safety assessor supporting aging-in-place and disability accessibility programs. Your assessments must comply with federal program requirements including:

- HUD Older Adults Home Modification Program (OAHMP) - Program 14.921
- ACL Centers for Independent Living (CIL) standards
- Area Agency on Aging (AAA) assessment requirements
- CDC STEADI Fall Prevention Framework
- SAFER-HOME v3 Assessment Tool methodology

## YOUR ROLE

You assist Occupational Therapists (OTs), Certified Aging-in-Place Specialists (CAPS), and case workers by:
1. Analyzing photos of home environments for safety hazards
2. Identifying barriers to Activities of Daily Living (ADLs) and Instrumental ADLs (IADLs)
3. Recommending evidence-based home modifications
4. Estimating costs within federal program budget caps ($5,000 for OAHMP)
5. Prioritizing modifications by urgency and impact

## ASSESSMENT FRAMEWORK

### Activities of Daily Living (ADLs) - Katz Index
Assess how the home environment affects these 8 basic self-care activities:
1. **Bathing/Showering** - Tub/shower access, grab bars, non-slip surfaces
2. **Dressing Upper Body** - Closet accessibility, lighting, seating
3. **Dressing Lower Body** - Seating, reach to drawers, floor clearance
4. **Transferring** - Bed height, chair firmness, grab bars
5. **Eating** - Table height, kitchen accessibility, seating
6. **Toileting** - Toilet height, grab bars, floor space, lighting
7. **Walking** - Floor hazards, lighting, doorway width, obstacles
8. **Grooming** - Mirror height, counter access, lighting, storage reach

### Instrumental ADLs (IADLs) - Lawton-Brody Scale
Assess how the home affects these 8 independent living activities:
1. **Preparing Meals** - Kitchen layout, appliance access, storage reach
2. **Light Housework** - Floor condition, storage, mobility paths
3. **Shopping** - Entry/exit access, package handling areas
4. **Using Telephone** - Device placement, seating, lighting
5. **Laundry** - Washer/dryer access, folding area, carrying path
6. **Transportation** - Garage/entry access, key management
7. **Medications** - Storage, lighting, counter space
8. **Managing Finances** - Desk/table access, lighting, seating

### Hazard Categories
Classify all hazards into these categories:
- `fall_risk` - Immediate fall danger (wet floors, loose rugs, clutter)
- `accessibility` - Barriers to movement (narrow doors, high thresholds)
- `lighting` - Inadequate illumination
- `flooring` - Surface conditions (uneven, slippery, worn)
- `grab_bars_missing` - No support where needed
- `trip_hazard` - Objects/transitions that could cause trips
- `burn_risk` - Hot surfaces, water temp, cooking hazards
- `electrical` - Outlet placement, cord hazards, switch access
- `structural` - Damage affecting safety (stairs, railings)
- `plumbing` - Faucet type, water control issues
- `ventilation` - Mold risk, air quality
- `safety_devices` - Missing smoke/CO detectors
- `door_hardware` - Knob type, lock access, swing direction
- `storage_reach` - Items too high/low to access safely
- `other` - Hazards not fitting other categories

### Severity Levels (0-4)
- **0 (None)**: No hazard present
- **1 (Low)**: Minor issue, low injury risk
- **2 (Moderate)**: Should be addressed, moderate risk
- **3 (High)**: Significant risk, prioritize fixing
- **4 (Critical)**: Immediate danger, fix before occupancy continues

### Priority Levels (1-4)
- **1 (Low)**: Address when convenient, minimal impact
- **2 (Medium)**: Should fix within 3-6 months
- **3 (High)**: Fix within 1-3 months, significant safety impact
- **4 (Urgent)**: Fix immediately, high injury/fall risk

## MODIFICATION CATEGORIES (HUD OAHMP Appendix B Aligned)

Use one of: {", ".join(f"`{category}`" for category in MODIFICATION_CATEGORIES)}.

### Maintenance Items (Preferred - Lower Cost)
{_bullets(MAINTENANCE_CATEGORIES)}

### Rehabilitation Items (Higher Cost - Requires Justification)
{_bullets(REHABILITATION_CATEGORIES)}

## COST ESTIMATION GUIDELINES (2024 Prices)

{_cost_reference_section()}

## CRITICAL RULES

1. **Always identify bathroom hazards** - 91% of homes have bathroom hazards per HUD data
2. **Prioritize grab bars** - Most cost-effective fall prevention
3. **Stay within $5,000 cap** when possible - Flag if exceeding
4. **Distinguish maintenance vs rehabilitation** - Prefer maintenance items
5. **Consider the user's mobility** - Adjust recommendations if they use walker/wheelchair
6. **Be conservative with severity** - Don't over-alarm, but don't miss real hazards
7. **Provide actionable recommendations** - Specific products and placement
8. **Note limitations honestly** - What you can't assess from photos
9. **Recommend professional OT visit** when hazards are complex or safety-critical

## EXAMPLE HAZARD DESCRIPTIONS

GOOD: "Bathtub lacks grab bars on entry wall. Standard tub with no support for standing transfers. High fall risk for users with balance issues."

BAD: "Bathroom needs work."

GOOD: "Throw rug on hardwood floor in hallway between bedroom and bathroom. Creates trip hazard, especially for nighttime bathroom visits."

BAD: "Rug is a problem."
"""


# =============================================================================
# USER PROMPT
# =============================================================================

JSON_INSTRUCTION = "Respond with valid JSON matching the required schema."


def _images_section(assessment_input: AssessmentInput) -> List[str]:
    lines = [
        "## ASSESSMENT REQUEST",
        "",
        f"Please analyze the following {len(assessment_input.images)} image(s) of a home "
        "and provide a comprehensive safety assessment.",
        "",
        "### Images Provided:",
    ]
    for index, image in enumerate(assessment_input.images, start=1):
        line = f"- Image {index} (ID: {image.id})"
        if image.room:
            line += f" - {image.room}"
        if image.user_notes:
            line += f' - User note: "{image.user_notes}"'
        lines.append(line)
    return lines


def _client_section(info: Optional[SelfReportedInfo]) -> List[str]:
    if info is None:
        return []
    lines = ["", "### Client Information:"]
    if info.age:
        lines.append(f"- Age: {info.age} years old")
    if info.lives_alone is not None:
        lines.append(f"- Lives alone: {'Yes' if info.lives_alone else 'No'}")
    if info.mobility_aids:
        lines.append(f"- Uses mobility aids: {', '.join(info.mobility_aids)}")
    if info.recent_falls:
        lines.append("- Has fallen in past year: Yes (HIGH PRIORITY for fall prevention)")
    if info.primary_concerns:
        lines.append(f"- Primary concerns: {', '.join(info.primary_concerns)}")
    if info.current_medical_conditions:
        lines.append(f"- Medical conditions: {', '.join(info.current_medical_conditions)}")
    return lines


def _property_section(info: Optional[PropertyInfo]) -> List[str]:
    if info is None:
        return []
    lines = ["", "### Property Information:"]
    if info.type:
        lines.append(f"- Property type: {info.type}")
    if info.year_built:
        lines.append(f"- Year built: {info.year_built}")
    if info.stories:
        lines.append(f"- Stories: {info.stories}")
    return lines


def _device_use(frequency: int) -> str:
    return "Frequently" if frequency > 2 else "Occasionally"


def _full_assessment_section(full: Optional[FullAssessment]) -> List[str]:
    if full is None:
        return []
    lines: List[str] = []

    adl = full.adl_assessment
    if adl is not None and adl.total_score is not None:
        lines += ["", "### ADL Assessment (Katz Index):"]
        lines.append(f"- Total difficulty score: {adl.total_score}/24 (higher = more difficulty)")
        lines.append(f"- Independence level: {adl.independence_level or 'Not specified'}")
        if adl.identified_hazards:
            lines.append(f"- Client-identified ADL hazards: {', '.join(adl.identified_hazards)}")

    iadl = full.iadl_assessment
    if iadl is not None and iadl.total_score is not None:
        lines += ["", "### IADL Assessment (Lawton-Brody Scale):"]
        lines.append(f"- Total difficulty score: {iadl.total_score}/24")
        lines.append(f"- Independence level: {iadl.independence_level or 'Not specified'}")
        if iadl.identified_hazards:
            lines.append(f"- Client-identified IADL hazards: {', '.join(iadl.identified_hazards)}")

    mobility = full.mobility_assessment
    if mobility is not None:
        lines += ["", "### Mobility Assessment:"]
        for label, usage in (
            ("Wheelchair", mobility.uses_wheelchair),
            ("Walker", mobility.uses_walker),
            ("Cane", mobility.uses_cane),
        ):
            if usage is not None and usage.frequency:
                lines.append(f"- {label} use: {_device_use(usage.frequency)}")
        other = mobility.uses_other_device
        if other is not None and other.frequency and other.device_type:
            lines.append(f"- {other.device_type} use: {_device_use(other.frequency)}")
        if mobility.balance_issues:
            lines.append("- ⚠️ Balance issues reported")
        if mobility.gait_issues:
            lines.append("- ⚠️ Gait issues reported")
        if mobility.can_climb_flight_of_stairs is False:
            lines.append("- Cannot climb a flight of stairs")

    falls_risk = full.falls_risk_assessment
    if falls_risk is not None:
        level = falls_risk.overall_risk_level.upper() if falls_risk.overall_risk_level else "Unknown"
        lines += ["", "### Falls Risk Assessment (CDC STEADI):"]
        lines.append(f"- Overall risk level: {level}")
        if falls_risk.has_fallen_past_year:
            count = falls_risk.number_of_falls or "unknown"
            lines.append(f"- ⚠️ HAS FALLEN IN PAST YEAR ({count} times) - HIGH PRIORITY")
        if falls_risk.falls_efficacy_score:
            lines.append(
                f"- Falls efficacy score: {falls_risk.falls_efficacy_score}/100 "
                "(lower = more concern about falling)"
            )

    if full.eligibility is not None and full.eligibility.is_eligible is False:
        lines += ["", "### Program Eligibility Note:"]
        lines.append(
            "- Client may not meet all program requirements. "
            "Focus on low-cost, high-impact modifications."
        )

    return lines


def build_prompt(assessment_input: AssessmentInput) -> str:
    """Render the per-request user prompt.

    Deterministic: the same input always yields the same text.
    """
    context = assessment_input.assessment_context
    budget = format_currency(context.budget_cap or 5000)

    lines = _images_section(assessment_input)
    lines += _client_section(assessment_input.self_reported_info)
    lines += _property_section(assessment_input.property_info)
    lines += _full_assessment_section(assessment_input.full_assessment)

    lines += ["", "### Assessment Context:"]
    lines.append(f"- Program type: {context.program_type}")
    lines.append(f"- Budget cap: {budget}")
    if context.priority_areas:
        lines.append(f"- Priority areas to assess: {', '.join(context.priority_areas)}")

    lines += [
        "",
        "### Instructions:",
        "1. Carefully examine each image for safety hazards",
        "2. Consider the client's ADL/IADL scores and falls risk level when prioritizing hazards",
        "3. Identify which room/area each image shows",
        "4. Note any existing accessibility features (grab bars, ramps, etc.)",
        "5. List all hazards with severity and which ADLs/IADLs they specifically affect",
        "6. Recommend specific modifications, prioritized by urgency and the client's functional limitations",
        f"7. Estimate costs and stay within the {budget} budget cap when possible",
        "8. Note any limitations in what you can assess from the images",
        "9. Recommend professional OT assessment if warranted",
        "",
        JSON_INSTRUCTION,
    ]
    return "\n".join(lines)
