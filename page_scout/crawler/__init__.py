"""page_scout.crawler: HTTP-загрузка, извлечение ссылок и BFS-обход сайта."""
