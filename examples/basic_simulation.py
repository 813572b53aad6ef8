#!/usr/bin/env python3
"""
Exemplo de Simulação Básica
Demonstração simples do simulador GeoTB
"""

from geotb import TuberculosisModel, create_city_scenario


def run_basic_simulation():
    """Executa uma simulação de um ano com configurações padrão."""

    print("🚀 Iniciando simulação básica do GeoTB")
    print("=" * 60)

    # 1. Configurar cenário
    print("1. Configurando cenário...")
    scenario = create_city_scenario(susceptible=500, exposed=5, days=365.0, seed=7)
    scenario.room.average_room_ventilation_rate = 1.0

    # 2. Criar modelo
    print("2. Criando modelo de simulação...")
    model = TuberculosisModel(scenario)

    # 3. Executar simulação
    print("\n▶️  Executando simulação...")
    print("-" * 60)

    while model.running:
        model.step()

        if model.tick % (24 * 30) == 0:
            counts = model.get_state_counts()
            print(f"\r⏱️  Dia {model.tick // 24:3d} | "
                  f"Expostos: {counts['EXPOSED']:4d} | "
                  f"Infectados: {counts['INFECTED']:4d} | "
                  f"Em tratamento: {counts['ON_TREATMENT']:4d}",
                  end="", flush=True)

    print("\n" + "=" * 60)
    print("✅ Simulação concluída!")

    # 4. Exibir resultados
    df = model.get_metrics_dataframe()
    print("\n📊 RESULTADOS DA SIMULAÇÃO")
    print("=" * 60)
    print(df.tail(5).to_string(index=False))
    print(f"\n🦠 Pico de casos ativos: {df['active_cases'].max()}")


if __name__ == "__main__":
    run_basic_simulation()
