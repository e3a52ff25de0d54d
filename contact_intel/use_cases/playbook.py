"""
Built-in product playbook used when a user has not configured their own.
"""

DEFAULT_PLAYBOOK = """
СПРАВОЧНИК ПРОДУКТОВ И УСЛУГ:

1. Система управления закупками с ИИ-аналитикой
   - Автоматизация процессов закупок
   - Оптимизация затрат на 15-20%
   - Анализ поставщиков и рисков
   - Интеграция с ERP-системами
   - Целевая аудитория: Крупные компании, банки, ритейл

2. Аналитическая BI-платформа
   - Бизнес-аналитика и отчетность
   - Прогнозирование и планирование
   - Интеграция данных из разных источников
   - Дашборды и визуализация
   - Целевая аудитория: Все отрасли, особенно финансы и ритейл

3. Система управления поставщиками
   - Оценка и мониторинг поставщиков
   - Управление рисками и соответствием
   - Автоматизация тендерных процессов
   - Интеграция с закупочными системами
   - Целевая аудитория: Производство, строительство, IT

4. Платформа для управления документооборотом
   - Электронный документооборот
   - Цифровые подписи и согласования
   - Архивирование и поиск документов
   - Интеграция с корпоративными системами
   - Целевая аудитория: Все отрасли

5. CRM система для B2B продаж
   - Управление клиентской базой
   - Автоматизация продаж
   - Аналитика эффективности
   - Интеграция с маркетинговыми инструментами
   - Целевая аудитория: B2B компании всех размеров

УНИКАЛЬНЫЕ ПРЕИМУЩЕСТВА:
- Быстрое внедрение (от 2 недель)
- Высокий ROI (окупаемость 6-18 месяцев)
- Российская разработка и поддержка
- Соответствие требованиям безопасности
- Гибкая настройка под бизнес-процессы
"""


def resolve_playbook(playbook: str = None) -> str:
    """The user's playbook, or the built-in one when unset or blank."""
    if playbook and playbook.strip():
        return playbook
    return DEFAULT_PLAYBOOK
