from hermes_tooling.cli.main import main

main()
