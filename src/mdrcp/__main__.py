from mdrcp.cli import main

main()
