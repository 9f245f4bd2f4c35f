from choreobook.cli import main

main()
