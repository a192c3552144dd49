from posturelab.models import Severity
from posturelab.services.muscle_imbalance import analyze_muscle_imbalance, calculate_balance
from posturelab.services.posture_analysis import analyze_posture

from conftest import make_analysis, metric, upright


def names(muscles):
    return [muscle.name for muscle in muscles]


def test_balanced_posture_has_no_findings():
    result = analyze_muscle_imbalance(make_analysis())
    assert result.tight_muscles == []
    assert result.weak_muscles == []
    assert result.overall_balance == 100


def test_forward_head():
    analysis = analyze_posture(upright(ear=(130, 50), shoulder=(100, 150)))
    result = analysis.muscle_imbalance

    assert names(result.tight_muscles) == ["Levator Scapulae", "Suboccipitals"]
    assert names(result.weak_muscles) == ["Deep Neck Flexors"]
    assert all(m.severity == Severity.MEDIUM for m in result.tight_muscles)
    assert all(m.status == "tight" for m in result.tight_muscles)
    # 6 of 9 possible severity points
    assert result.overall_balance == 33


def test_anterior_pelvic_tilt_keeps_catalog_order():
    result = analyze_muscle_imbalance(make_analysis(
        pelvic_tilt=metric(angle=25.0, severity=Severity.SEVERE),
    ))

    assert names(result.tight_muscles) == [
        "Hip Flexors (Iliopsoas)",
        "Rectus Femoris",
        "Erector Spinae (Lumbar)",
    ]
    assert names(result.weak_muscles) == [
        "Core Abdominals",
        "Gluteus Maximus",
        "Gluteus Medius",
    ]
    # Core Abdominals takes the trunk severity even when matched via pelvic tilt
    assert result.weak_muscles[0].severity == Severity.NORMAL


def test_severity_can_come_from_another_metric():
    result = analyze_muscle_imbalance(make_analysis(
        knee_alignment=metric(angle=160.0, severity=Severity.MEDIUM),
    ))

    hamstrings = result.tight_muscles[0]
    assert hamstrings.name == "Hamstrings"
    assert hamstrings.severity == Severity.NORMAL
    assert hamstrings.related_metrics == ["Pelvic Tilt", "Knee Alignment"]
    assert names(result.weak_muscles) == ["Tibialis Anterior"]
    assert result.overall_balance == 67


def test_balance_of_empty_list():
    assert calculate_balance([]) == 100
