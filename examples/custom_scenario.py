#!/usr/bin/env python3
"""
Exemplo de Cenário Personalizado
Cria um cenário em JSON, recarrega do disco e executa
"""

from pathlib import Path

from geotb import ScenarioConfig, TuberculosisModel


def create_custom_scenario():
    """Cria, salva e executa um cenário totalmente personalizado."""

    print("🛠️  Criando cenário personalizado")
    print("=" * 70)

    data = {
        "name": "Comunidade Densa",
        "description": "Muitos moradores por domicílio e pouca ventilação",
        "duration_days": 240,
        "seed": 2024,
        "population": {
            "susceptible": 600,
            "exposed": 8,
            "households": 80,
            "workplaces": 10,
            "smokers_share": 0.3
        },
        "grid": {"width": 30, "height": 30},
        "room": {"average_room_volume": 30.0, "average_room_ventilation_rate": 0.5},
        "epidemiology": {"mean_incubation_period": 45.0, "treatment_dropout_rate": 0.2}
    }

    scenario = ScenarioConfig.from_dict(data)
    path = Path("custom_scenario.json")
    scenario.save_to_json(path)
    print(f"💾 Cenário salvo em {path}")

    model = TuberculosisModel(ScenarioConfig.load_from_json(path))
    model.run()

    df = model.get_metrics_dataframe()
    print(df.iloc[::30].to_string(index=False))


if __name__ == "__main__":
    create_custom_scenario()
