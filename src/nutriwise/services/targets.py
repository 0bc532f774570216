"""Calorie and macro targets from the profile and training load.

BMR uses the Mifflin-St Jeor equation, scaled by an activity multiplier to
TDEE, then adjusted for the goal. Protein is set per kg of bodyweight, fat
at a fixed share of calories and carbs take the remainder.
"""

from nutriwise.domain.numbers import round_int
from nutriwise.domain.profile import ActivityLevel, Gender, Goal, Profile
from nutriwise.domain.targets import MacroTargets, TargetResult

ACTIVITY_MULTIPLIERS = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.ATHLETE: 1.9,
}

KCAL_PER_GRAM_PROTEIN = 4
KCAL_PER_GRAM_CARBS = 4
KCAL_PER_GRAM_FAT = 9
FAT_CALORIE_SHARE = 0.25

TRAINING_DEFICIT_MESSAGE = (
    "Workout detected: Deficit reduced & Protein bumped for recovery."
)
TRAINING_SURPLUS_MESSAGE = "Great work! Fuel up for growth."


def basal_metabolic_rate(profile: Profile) -> float:
    """Return the Mifflin-St Jeor BMR; non-male profiles use the female offset."""
    bmr = 10 * profile.weight_kg + 6.25 * profile.height_cm - 5 * profile.age
    if profile.gender == Gender.MALE:
        return bmr + 5
    return bmr - 161


def total_daily_energy_expenditure(profile: Profile) -> int:
    """Return BMR scaled by the activity multiplier, rounded."""
    multiplier = ACTIVITY_MULTIPLIERS[profile.activity_level]
    return round_int(basal_metabolic_rate(profile) * multiplier)


def compute_targets(profile: Profile, training_load: bool) -> TargetResult:
    """Return the calorie target, macro targets and advice for a day."""
    tdee = total_daily_energy_expenditure(profile)
    message = ""
    if profile.goal == Goal.LOSE_FAT:
        if training_load:
            target = tdee - 250
            protein_factor = 2.0
            message = TRAINING_DEFICIT_MESSAGE
        else:
            target = tdee - 500
            protein_factor = 1.8
    elif profile.goal == Goal.GAIN_MUSCLE:
        target = tdee + 300
        protein_factor = 2.0
        if training_load:
            protein_factor = 2.2
            message = TRAINING_SURPLUS_MESSAGE
    else:
        target = tdee
        protein_factor = 1.6 if training_load else 1.4

    protein = round_int(profile.weight_kg * protein_factor)
    fat = round_int(target * FAT_CALORIE_SHARE / KCAL_PER_GRAM_FAT)
    carbs = max(
        0,
        round_int(
            (target - protein * KCAL_PER_GRAM_PROTEIN - fat * KCAL_PER_GRAM_FAT)
            / KCAL_PER_GRAM_CARBS
        ),
    )
    return TargetResult(
        calorie_target=target,
        macro_targets=MacroTargets(protein=protein, carbs=carbs, fat=fat),
        advice_message=message,
    )
