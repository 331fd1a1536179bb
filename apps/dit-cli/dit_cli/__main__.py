from dit_cli.cli import main

main()
