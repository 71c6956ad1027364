"""
Manutenção de Snapshots de Sprint

Este pacote implementa rotinas offline para reconstruir, corrigir e validar os
contadores de estado (To Do, In Progress, Done) dos snapshots diários de sprint
espelhados do Azure DevOps, usados no burndown e no cumulative flow.
"""

__version__ = "1.0.0"
