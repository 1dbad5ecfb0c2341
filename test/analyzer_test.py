from models.schema import InterpretationCase, Shift, TimeRecord
from services.analyzer import MISSING_FINAL_OUT, MISSING_LUNCH_OUT, analyze

SHIFT = Shift(
    name="Comercial",
    start_time="08:00",
    end_time="17:00",
    lunch_start_time="12:00",
    lunch_end_time="13:00",
)


def test_no_punches():
    analysis = analyze([], SHIFT)
    assert analysis.case == InterpretationCase.EMPTY
    assert analysis.interpretation == "Sem registros (falta)"
    assert analysis.issues == ["Nenhum registro de ponto"]
    assert analysis.calculations == {"expected_work": 480, "lunch_time": 60}


def test_single_punch_with_shift():
    analysis = analyze(["08:00"], SHIFT)
    assert analysis.interpretation == "Apenas 1 registro - assumido almoço padrão"
    assert analysis.issues == []
    assert analysis.suggestions == ["Verificar se houve registro de saída/retorno reais"]


def test_single_punch_without_shift():
    analysis = analyze(["08:00"], None)
    assert analysis.interpretation == "Apenas 1 registro - sem turno para inferir almoço"
    assert analysis.issues == [MISSING_FINAL_OUT]
    assert analysis.calculations == {}


def test_lunch_return_without_lunch_departure():
    analysis = analyze(["08:00", "14:00"], SHIFT)
    assert analysis.case == InterpretationCase.LUNCH_RETURN
    assert analysis.interpretation == "Entrada + Volta do almoço (falta saída para almoço)"
    assert analysis.issues == [MISSING_LUNCH_OUT, MISSING_FINAL_OUT]


def test_continuous_day_suggests_lunch_deduction():
    analysis = analyze(["08:00", "11:00"], SHIFT)
    assert analysis.interpretation == "Entrada + Saída (jornada contínua)"
    assert analysis.suggestions == [
        "Intervalo de almoço padrão de 60 minutos pode ser descontado (se jornada > 6h)"
    ]
    assert analysis.issues == []


def test_continuous_day_without_shift_has_no_suggestion():
    analysis = analyze(["08:00", "17:00"], None)
    assert analysis.case == InterpretationCase.NO_SHIFT
    assert analysis.interpretation == "Entrada + Saída (jornada contínua)"
    assert analysis.suggestions == []


def test_lunch_departure_is_missing_final_clock_out():
    analysis = analyze(["08:00", "12:30"], SHIFT)
    assert analysis.case == InterpretationCase.LUNCH_DEPARTURE
    assert analysis.interpretation == "Entrada + Volta do almoço (falta saída final)"
    assert analysis.issues == [MISSING_FINAL_OUT]


def test_full_day_reports_inserted_lunch():
    analysis = analyze(["08:00", "17:00"], SHIFT)
    assert analysis.case == InterpretationCase.FULL_DAY
    assert analysis.interpretation == "Registro normal"
    assert analysis.issues == []
    assert analysis.suggestions == ["Almoço padrão inserido entre 12:00 e 13:00"]


def test_four_punches_are_complete():
    analysis = analyze(["08:00", "12:00", "13:00", "17:00"], SHIFT)
    assert analysis.interpretation == "Registro completo"
    assert analysis.issues == []


def test_three_punches_are_missing_final_clock_out():
    analysis = analyze(["08:00", "12:00", "13:00"], SHIFT)
    assert analysis.interpretation == "Registro normal"
    assert analysis.issues == [MISSING_FINAL_OUT]


def test_original_count_drives_the_label():
    record = TimeRecord(clock_in_1="08:00", clock_out_1="12:00", clock_in_2="13:00")
    assert analyze(record, SHIFT, original_count=1).interpretation == "Apenas 1 registro - assumido almoço padrão"
    assert analyze(record, SHIFT).interpretation == "Registro normal"


def test_stored_full_day_keeps_inserted_lunch_suggestion():
    record = TimeRecord(clock_in_1="08:00", clock_out_1="12:00", clock_in_2="13:00", clock_out_2="17:00")
    analysis = analyze(record, SHIFT, original_count=2)
    assert analysis.case == InterpretationCase.SEQUENTIAL
    assert analysis.suggestions == ["Almoço padrão inserido entre 12:00 e 13:00"]
