from please.cli import main

main()
