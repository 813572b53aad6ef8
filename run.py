#!/usr/bin/env python3
"""
CLI para Simulador de Tuberculose Urbana (GeoTB).

Ferramenta de linha de comando para executar simulações baseadas em agentes,
gerar relatórios JSON e visualizar a dinâmica por compartimento.

Uso Exemplo:
    python run.py --days 365 --susceptible 1000 --exposed 10 --plot
"""

import argparse
import json
import sys
import logging
from datetime import datetime

import matplotlib.pyplot as plt
import pandas as pd

from geotb.config import ScenarioConfig, create_city_scenario
from geotb.model import TuberculosisModel

logger = logging.getLogger("GeoTB-CLI")


def parse_arguments(argv=None):
    """Configura e processa os argumentos da linha de comando."""
    parser = argparse.ArgumentParser(
        description="Simulador de Transmissão de Tuberculose (ABM + Eventos Discretos)",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    # Cenário
    parser.add_argument('--config', type=str, help="Arquivo JSON de cenário (sobrepõe os demais).")
    parser.add_argument('--susceptible', type=int, default=1000, help="Cidadãos suscetíveis.")
    parser.add_argument('--exposed', type=int, default=10, help="Casos índice (expostos).")
    parser.add_argument('--days', type=float, default=365.0, help="Duração simulada em dias.")
    parser.add_argument('--seed', type=int, default=42, help="Semente aleatória.")

    # Saídas
    parser.add_argument('--output', type=str, help="Caminho para salvar relatório JSON.")
    parser.add_argument('--plot', action='store_true', help="Gerar gráfico PNG por compartimento.")
    parser.add_argument('--verbose', action='store_true', help="Logs em nível DEBUG.")

    return parser.parse_args(argv)


def get_scenario_config(args) -> ScenarioConfig:
    """Fábrica de cenários baseada nos argumentos."""
    if args.config:
        return ScenarioConfig.load_from_json(args.config)
    return create_city_scenario(
        susceptible=args.susceptible,
        exposed=args.exposed,
        days=args.days,
        seed=args.seed
    )


def run_simulation_loop(model: TuberculosisModel):
    """Executa o loop principal com feedback a cada 30 dias simulados."""
    logger.info(f"Iniciando simulação: {model.config.name}")
    logger.info(f"Grid: {model.environment.width}x{model.environment.height}, "
                f"População: {len(model.citizens)}")

    last_month_reported = 0
    while model.running:
        model.step()

        current_month = int(model.tick / (24 * 30))
        if current_month > last_month_reported:
            stats = model.get_state_counts()
            logger.info(
                f"Dia {model.tick // 24}: S={stats['SUSCEPTIBLE']} E={stats['EXPOSED']} "
                f"I={stats['INFECTED']} T={stats['ON_TREATMENT']} R={stats['IMMUNE']}"
            )
            last_month_reported = current_month

    logger.info(f"Simulação concluída. Eventos despachados: {model.scheduler.dispatched}")


def analyze_results(model: TuberculosisModel):
    """Calcula métricas finais da simulação."""
    history = model.get_metrics_dataframe()
    final_stats = history.iloc[-1]
    population = len(model.citizens)

    return {
        "peak_infected": int(history['I'].max()),
        "peak_active_cases": int(history['active_cases'].max()),
        "final_active_prevalence": float(final_stats['active_cases'] / population) if population else 0.0,
        "final_susceptible": int(final_stats['S']),
        "final_exposed": int(final_stats['E']),
        "final_infected": int(final_stats['I']),
        "final_on_treatment": int(final_stats['T']),
        "final_immune": int(final_stats['R']),
        "history_df": history
    }


def save_json_results(args, config: ScenarioConfig, results, history_df: pd.DataFrame):
    """Salva os resultados em formato JSON estruturado."""
    output_data = {
        "scenario": config.name,
        "timestamp": datetime.now().isoformat(),
        "parameters": config.to_dict(),
        "results": {k: v for k, v in results.items() if k != "history_df"},
        "time_series": history_df[['day', 'S', 'E', 'I', 'T', 'R']].to_dict(orient='records')
    }

    try:
        with open(args.output, 'w', encoding='utf-8') as f:
            json.dump(output_data, f, indent=4)
        logger.info(f"Relatório salvo em: {args.output}")
    except IOError as e:
        logger.error(f"Erro ao salvar JSON: {e}")


def generate_plot(config: ScenarioConfig, history_df: pd.DataFrame):
    """Gera gráfico por compartimento usando Matplotlib."""
    plt.figure(figsize=(10, 6))

    plt.plot(history_df['day'], history_df['S'], label='Suscetíveis', color='blue', linestyle='--')
    plt.plot(history_df['day'], history_df['E'], label='Expostos', color='orange')
    plt.plot(history_df['day'], history_df['I'], label='Infectados', color='red', linewidth=2)
    plt.plot(history_df['day'], history_df['T'], label='Em tratamento', color='purple')
    plt.plot(history_df['day'], history_df['R'], label='Imunes', color='green')

    plt.title(f"Dinâmica da Tuberculose - {config.name}")
    plt.xlabel("Tempo (Dias)")
    plt.ylabel("Número de Pessoas")
    plt.legend()
    plt.grid(True, alpha=0.3)

    filename = f"tb_{datetime.now().strftime('%Y%m%d_%H%M%S')}.png"
    plt.savefig(filename)
    logger.info(f"Gráfico salvo em: {filename}")
    plt.close()


def main(argv=None):
    args = parse_arguments(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    try:
        config = get_scenario_config(args)
        model = TuberculosisModel(config)
        run_simulation_loop(model)
        results = analyze_results(model)

        print("\n" + "=" * 40)
        print(f" RESULTADOS: {config.name}")
        print("=" * 40)
        print(f" Tempo Simulado   : {config.duration_days} dias")
        print(f" Pico Infectados  : {results['peak_infected']} pessoas")
        print(f" Pico Casos Ativos: {results['peak_active_cases']} pessoas")
        print("-" * 40)
        print(f" Final S/E/I/T/R  : {results['final_susceptible']} / {results['final_exposed']} / "
              f"{results['final_infected']} / {results['final_on_treatment']} / {results['final_immune']}")
        print("=" * 40 + "\n")

        if args.output:
            save_json_results(args, config, results, results['history_df'])

        if args.plot:
            generate_plot(config, results['history_df'])

    except KeyboardInterrupt:
        print("\nSimulação interrompida pelo usuário.")
        sys.exit(0)
    except Exception:
        logger.exception("Erro inesperado durante a execução.")
        sys.exit(1)


if __name__ == "__main__":
    main()
