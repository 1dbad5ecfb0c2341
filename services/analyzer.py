from typing import Optional

from models.schema import Analysis, Shift
from services.calculator import expected_work_minutes, lunch_minutes
from services.interpreter import PunchSource, interpret_punches

MISSING_LUNCH_OUT = "Falta registro de saída para almoço"
MISSING_FINAL_OUT = "Falta registro de saída final"


def analyze(source: PunchSource, shift: Optional[Shift], original_count: Optional[int] = None) -> Analysis:
    """Diagnostic view of a day for the review screens. Never used for pay."""
    interpretation = interpret_punches(source, shift)
    record = interpretation.record
    defined = interpretation.punch_count if original_count is None else original_count

    label = "Registro normal"
    issues = []
    suggestions = []
    calculations = {}

    if shift:
        calculations["expected_work"] = expected_work_minutes(shift)
        calculations["lunch_time"] = lunch_minutes(shift)

    if defined == 0:
        label = "Sem registros (falta)"
        issues.append("Nenhum registro de ponto")
    elif defined == 1:
        if shift:
            label = "Apenas 1 registro - assumido almoço padrão"
            suggestions.append("Verificar se houve registro de saída/retorno reais")
        else:
            label = "Apenas 1 registro - sem turno para inferir almoço"
            issues.append(MISSING_FINAL_OUT)
    elif defined == 2:
        if record.clock_in_2 and not record.clock_out_1:
            label = "Entrada + Volta do almoço (falta saída para almoço)"
            issues.append(MISSING_LUNCH_OUT)
            issues.append(MISSING_FINAL_OUT)
        elif record.clock_out_1 and not record.clock_in_2:
            label = "Entrada + Saída (jornada contínua)"
            if shift:
                suggestions.append(
                    f"Intervalo de almoço padrão de {calculations['lunch_time']} minutos "
                    "pode ser descontado (se jornada > 6h)"
                )
        elif record.clock_in_2 and not record.clock_out_2:
            label = "Entrada + Volta do almoço (falta saída final)"
            issues.append(MISSING_FINAL_OUT)
        elif shift and (record.clock_out_1, record.clock_in_2) == (shift.lunch_start_time, shift.lunch_end_time):
            # Stored full days re-interpret as SEQUENTIAL; the inserted lunch slots identify them
            suggestions.append(
                f"Almoço padrão inserido entre {shift.lunch_start_time} e {shift.lunch_end_time}"
            )
    else:
        if defined >= 4:
            label = "Registro completo"
        if any(bool(clock_in) != bool(clock_out) for clock_in, clock_out in record.pairs()):
            issues.append(MISSING_FINAL_OUT)

    return Analysis(
        case=interpretation.case,
        interpretation=label,
        issues=issues,
        suggestions=suggestions,
        calculations=calculations,
    )
