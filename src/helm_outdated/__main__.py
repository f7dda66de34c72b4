from helm_outdated.cli.app import main

main()
