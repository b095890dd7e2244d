from avgrel.cli.app import main

main()
