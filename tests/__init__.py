"""
Pacote de testes automatizados (pytest).

Contém testes unitários do agendador, da fonte estocástica, do ambiente,
da máquina de estados dos cidadãos e do contágio, além da integração do modelo.

Para executar todos os testes:
    pytest tests/ -v
"""
