from playdeploy.cli.app import main

main()
