"""
utils/constants.py

Purpose: Centralized static content

- All user-facing messages (Spanish, es-AR)
- Menu option codes and keywords
- Expense categories

(Prevents hardcoding across the codebase)
"""

# ============================================================
# KEYWORDS
# ============================================================

# Compared after fold_text(), so "Menú" and "MENU" match too
RESET_KEYWORDS = {"menu"}
GREETING_KEYWORDS = {"hola", "hi", "hello", "buenas", "inicio", "start"}

MENU_OPTION_SALARY = "1"
MENU_OPTION_SHARED_EXPENSE = "2"
MENU_OPTION_INDIVIDUAL_EXPENSE = "3"
MENU_OPTION_EXPENSES_REPORT = "4"
MENU_OPTION_PARTNER = "5"
MENU_OPTION_MONTHLY_SUMMARY = "6"

SALARY_LABEL = "Sueldo"

EXPENSE_CATEGORIES = (
    "comida",
    "supermercado",
    "transporte",
    "servicios",
    "hogar",
    "salud",
    "ocio",
    "ropa",
    "educacion",
    "otros",
)

MIN_PARTNER_NAME_LENGTH = 2
MAX_PARTNER_NAME_LENGTH = 50
MAX_DESCRIPTION_LENGTH = 200

# ============================================================
# MAIN MENU
# ============================================================

MAIN_MENU_MESSAGE = """🏦 *GESTOR FINANCIERO PERSONAL*

1️⃣ Ingresar Sueldo
2️⃣ Ingresar Gasto Compartido
3️⃣ Ingresar Gasto Individual
4️⃣ Ver Gastos
5️⃣ Configurar Pareja
6️⃣ Resumen del Mes

Envía el número de la opción 👆
💡 Atajo: _monto descripción categoría_ (ej: 15000 almuerzo comida)"""

INVALID_OPTION_MESSAGE = "❌ Opción no válida."

GENERIC_ERROR_MESSAGE = "😕 Disculpa, hubo un error. Volvamos al menú."

STORAGE_ERROR_MESSAGE = "❌ Hubo un problema con la planilla de datos. Si estabas registrando algo, no se guardó: intenta nuevamente."

# ============================================================
# SALARY
# ============================================================

ASK_SALARY_MESSAGE = """💰 *INGRESAR SUELDO*

Por favor ingresa tu sueldo del mes.

Ejemplos válidos:
• 1400000
• 1.400.000
• 1,400,000

Escribe solo el número:"""

INVALID_SALARY_MESSAGE = """❌ Por favor ingresa un monto válido.

Ejemplos:
• 1400000
• 850000
• 2500000

Escribe solo números (sin letras ni símbolos):"""

SALARY_SAVED_MESSAGE = """✅ *SUELDO REGISTRADO*

💰 Monto: ${amount}
📅 Fecha: {date}"""

# ============================================================
# EXPENSES
# ============================================================

ASK_SHARED_AMOUNT_MESSAGE = """👥 *GASTO COMPARTIDO*

¿Cuánto gastaron entre los dos?

Ejemplos:
• 50000 (supermercado)
• 25000 (cena)
• 150000 (servicios)

Escribe el monto:"""

ASK_INDIVIDUAL_AMOUNT_MESSAGE = """🛍️ *GASTO INDIVIDUAL*

¿Cuánto gastaste solo/a?

Ejemplos:
• 15000 (almuerzo)
• 80000 (ropa)
• 30000 (transporte)

Escribe el monto:"""

INVALID_SHARED_AMOUNT_MESSAGE = """❌ Por favor ingresa un monto válido.

Ejemplos: 50000, 25000, 150000

Escribe solo números:"""

INVALID_INDIVIDUAL_AMOUNT_MESSAGE = """❌ Por favor ingresa un monto válido.

Ejemplos: 15000, 80000, 30000

Escribe solo números:"""

ASK_SHARED_DESCRIPTION_MESSAGE = """💡 *DESCRIPCIÓN DEL GASTO*

Monto: ${amount}

¿En qué gastaron?

Ejemplos:
• Supermercado
• Cena restaurante
• Servicios casa
• Transporte

Escribe la descripción:"""

ASK_INDIVIDUAL_DESCRIPTION_MESSAGE = """💡 *DESCRIPCIÓN DEL GASTO*

Monto: ${amount}

¿En qué gastaste?

Ejemplos:
• Almuerzo trabajo
• Ropa personal
• Transporte
• Entretenimiento

Escribe la descripción:"""

EMPTY_DESCRIPTION_MESSAGE = "❌ La descripción no puede estar vacía. Escribe en qué fue el gasto:"

SHARED_EXPENSE_SAVED_MESSAGE = """✅ *GASTO COMPARTIDO REGISTRADO*

💰 Monto: ${amount}
📝 Descripción: {description}
👥 Tipo: Compartido ({percentage}% cada uno)
📅 Fecha: {date}"""

INDIVIDUAL_EXPENSE_SAVED_MESSAGE = """✅ *GASTO INDIVIDUAL REGISTRADO*

💰 Monto: ${amount}
📝 Descripción: {description}
🛍️ Tipo: Individual
📅 Fecha: {date}"""

QUICK_EXPENSE_SAVED_MESSAGE = """✅ *GASTO REGISTRADO*

💰 Monto: ${amount}
📝 Descripción: {description}
🏷️ Categoría: {category}
📅 Fecha: {date}"""

QUICK_ENTRY_FORMAT_ERROR = """❌ Formato incorrecto.

Usa: _monto descripción categoría_
Ejemplo: 15000 almuerzo comida"""

QUICK_ENTRY_AMOUNT_ERROR = "❌ El monto debe ser un número positivo. Ejemplo: 15000 almuerzo comida"

QUICK_ENTRY_DESCRIPTION_ERROR = "❌ La descripción debe tener al menos 2 caracteres."

QUICK_ENTRY_CATEGORY_ERROR = """❌ Categoría no válida.

Categorías: {categories}"""

# ============================================================
# PARTNER
# ============================================================

ASK_PARTNER_NAME_MESSAGE = """👫 *CONFIGURAR PAREJA*

¿Cómo se llama tu pareja?"""

INVALID_PARTNER_NAME_MESSAGE = "❌ El nombre debe tener al menos 2 caracteres. ¿Cómo se llama tu pareja?"

ASK_PARTNER_PHONE_MESSAGE = """📱 *NÚMERO DE {name_upper}*

¿Cuál es el número de WhatsApp de {name}?

Formato: +54911XXXXXXXX
Ejemplo: +5491123456789

Escribe el número:"""

INVALID_PARTNER_PHONE_MESSAGE = """❌ Número no válido.

Formato: +54911XXXXXXXX
Ejemplo: +5491123456789

Escribe el número:"""

OWN_PHONE_AS_PARTNER_MESSAGE = "❌ Ese es tu propio número. Escribe el número de tu pareja:"

PARTNER_SAVED_MESSAGE = """✅ *PAREJA CONFIGURADA*

👫 Nombre: {name}
📱 Teléfono: {phone}

Ahora los gastos de {name} aparecerán en tus reportes mensuales."""

# ============================================================
# REPORTS
# ============================================================

EXPENSES_REPORT_TITLE = "📊 *GASTOS DEL MES*"

NO_EXPENSES_MESSAGE = "No hay gastos registrados este mes."

MONTHLY_SUMMARY_TITLE = "📅 *RESUMEN DEL MES*"

SHARED_LABEL = "compartido"
INDIVIDUAL_LABEL = "individual"
