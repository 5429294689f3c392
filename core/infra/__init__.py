"""
Paquete Infra de Core.

Contiene infraestructura transversal: filtros de logging.

NOTA: No importar modelos aquí; settings/logging.py referencia este paquete
antes de que las apps estén cargadas.
"""
