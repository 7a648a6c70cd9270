from tariffimpact.cli.main import main

main()
