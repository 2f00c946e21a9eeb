"""
Módulo de Códigos de Costo - POS

Permite mostrar en cada producto un código de letras en lugar del costo real,
de modo que el personal de caja no pueda leer el costo directamente.

COMPONENTES:
- codec: mapeo inmutable dígito → letra, codificación y decodificación voraz
- models: mapeo activo guardado (una fila) e historial de cambios
- service: lectura/actualización/restablecimiento del mapeo y utilidades de codificación
- router: endpoints bajo /cost-codes

MAPEO POR DEFECTO:
- 1-9 → N B Q M F Z V L J, 0 → S
- 00 → SC, 000 → SCS
"""
