"""page_scout.parser: Разбор HTML, извлечение основного текста и sitemap XML."""
