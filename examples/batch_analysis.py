#!/usr/bin/env python3
"""
Exemplo de Análise em Lote
Executa múltiplas simulações variando ventilação e probabilidade de progressão
"""

import os
from datetime import datetime

import pandas as pd

from geotb import TuberculosisModel, create_city_scenario


def run_batch_analysis():
    """Executa múltiplas simulações com diferentes parâmetros ajustáveis."""

    print("📋 Executando análise em lote do GeoTB")
    print("=" * 70)

    ach_levels = [0.5, 2.0, 6.0]
    infection_probabilities = [0.05, 0.1, 0.2]

    results = []
    total = len(ach_levels) * len(infection_probabilities)
    current = 0

    print(f"Total de simulações planejadas: {total}")
    print("-" * 70)

    for ach in ach_levels:
        for probability in infection_probabilities:
            current += 1
            print(f"\n🎬 Simulação {current}/{total}")
            print(f"  Config: ACH={ach}, p_infecção={probability}")

            scenario = create_city_scenario(susceptible=300, exposed=5, days=180.0, seed=current)
            model = TuberculosisModel(scenario)

            # Parâmetros ajustáveis sobrescritos como faria a calibração externa
            model.parameters.set_parameter_value("average_room_ventilation_rate", ach)
            model.parameters.set_parameter_value("infection_probability", probability)
            model.run()

            df = model.get_metrics_dataframe()
            results.append({
                'ach': ach,
                'infection_probability': probability,
                'peak_active_cases': int(df['active_cases'].max()),
                'final_infected': int(df['I'].iloc[-1]),
                'exposure_events': int((df['E'].diff().clip(lower=0)).sum())
            })
            print(f"  ✅ Concluído | Pico casos ativos: {results[-1]['peak_active_cases']}")

    df = pd.DataFrame(results)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    results_dir = os.path.join("data", "results", f"batch_{timestamp}")
    os.makedirs(results_dir, exist_ok=True)

    csv_file = os.path.join(results_dir, "batch_results.csv")
    df.to_csv(csv_file, index=False)

    print("\n" + "=" * 70)
    print("📊 RESUMO")
    print("=" * 70)
    print(df.pivot(index='ach', columns='infection_probability', values='peak_active_cases'))

    print(f"\n💾 Resultados salvos em: {csv_file}")
    print("\n✅ Análise em lote concluída!")


if __name__ == "__main__":
    run_batch_analysis()
