from awsp.cli import cli_main

cli_main()
