from web_template.main import cli_entry

cli_entry()
